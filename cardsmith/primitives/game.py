"""
Game Aggregate - The root of all game state.

Design principles:
- Immutable: every update returns a new Game sharing untouched parts
- Self-contained: every id referenced by a player, zone or card must
  resolve inside the same Game
- The effect stack is a distinguished zone kept outside the zone list
- The event manager travels with the game
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, TYPE_CHECKING

from ..errors import EntityValidationError
from .card import Card, validate_card
from .ids import CardId, GameId, PlayerId, ZoneId, create_zone_id, is_valid_id
from .player import Player, validate_player
from .zone import Zone, ZoneType, create_stack, validate_zone

if TYPE_CHECKING:
    from ..events.manager import EventManager

GAME_PHASES = ("upkeep", "main", "combat", "end")


@dataclass(frozen=True)
class Game:
    """
    Complete game state at a point in time.

    All state changes go through the action library.
    """
    id: GameId
    stack: Zone
    event_manager: EventManager
    players: tuple[Player, ...] = ()
    zones: tuple[Zone, ...] = ()
    cards: tuple[Card, ...] = ()
    current_player: PlayerId | None = None
    phase: str = "setup"
    turn_number: int = 0
    global_properties: dict[str, Any] = field(default_factory=dict)

    def _copy_with(self, **kwargs) -> Game:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def create_game(
    id: GameId,
    players: list[Player] | tuple[Player, ...] | None = None,
    zones: list[Zone] | tuple[Zone, ...] | None = None,
    cards: list[Card] | tuple[Card, ...] | None = None,
    current_player: PlayerId | None = None,
    phase: str = "setup",
    turn_number: int = 0,
    global_properties: dict[str, Any] | None = None,
    stack: Zone | None = None,
    event_manager: EventManager | None = None,
) -> Game:
    """
    Create a game, validating every entity and every cross reference.

    A fresh stack and event manager are created when not supplied.
    """
    from ..events.manager import create_event_manager

    if not is_valid_id(id, GameId):
        raise EntityValidationError("Invalid game ID")
    if not isinstance(phase, str):
        raise EntityValidationError("Phase must be a string")
    if isinstance(turn_number, bool) or not isinstance(turn_number, int) or turn_number < 0:
        raise EntityValidationError("Turn number cannot be negative")

    game = Game(
        id=id,
        stack=stack if stack is not None else create_stack(create_zone_id()),
        event_manager=event_manager if event_manager is not None else create_event_manager(),
        players=tuple(players or ()),
        zones=tuple(zones or ()),
        cards=tuple(cards or ()),
        current_player=current_player,
        phase=phase,
        turn_number=turn_number,
        global_properties=dict(global_properties or {}),
    )
    validate_game(game)
    return game


def validate_game(game: Any) -> None:
    """Validate shape, uniqueness and referential integrity of a game."""
    if not isinstance(game, Game):
        raise EntityValidationError("Game must be a Game")
    if not isinstance(game.stack, Zone) or game.stack.zone_type is not ZoneType.STACK:
        raise EntityValidationError("Game must have a stack")

    for player in game.players:
        validate_player(player)
    for zone in game.zones:
        validate_zone(zone)
    validate_zone(game.stack)
    for card in game.cards:
        validate_card(card)

    _check_unique([p.id for p in game.players], "Duplicate player ID")
    _check_unique([z.id for z in game.zones] + [game.stack.id], "Duplicate zone ID")
    _check_unique([c.id for c in game.cards], "Duplicate card ID")

    problems = validate_references(game)
    if problems:
        raise EntityValidationError(problems[0])


def _check_unique(ids: list, message: str) -> None:
    if len(set(ids)) != len(ids):
        raise EntityValidationError(message)


def validate_references(game: Game) -> list[str]:
    """
    List every dangling or inconsistent reference in the game.

    Checks current player, zone owners, card owners, card locations
    (the zone named by a card must list it) and that each card id
    listed in a zone belongs to a card of this game.
    """
    problems: list[str] = []
    player_ids = {p.id for p in game.players}
    zones_by_id = {z.id: z for z in all_zones(game)}
    card_ids = {c.id for c in game.cards}

    if game.current_player is not None and game.current_player not in player_ids:
        problems.append("Current player not found in game")

    for zone in zones_by_id.values():
        if zone.owner is not None and zone.owner not in player_ids:
            problems.append(f"Zone {zone.id} owner not found in game")
        for card_id in zone.cards:
            if card_id not in card_ids:
                problems.append(f"Zone {zone.id} lists unknown card {card_id}")

    for card in game.cards:
        if card.owner not in player_ids:
            problems.append(f"Card {card.id} owner not found in game")
        zone = zones_by_id.get(card.current_zone)
        if zone is None:
            problems.append(f"Card {card.id} zone not found in game")
        elif card.id not in zone.cards:
            problems.append(f"Card {card.id} is not listed by its zone")

    for player in game.players:
        for zone_id in player.zones:
            if zone_id not in zones_by_id:
                problems.append(f"Player {player.id} zone {zone_id} not found in game")

    return problems


def update_game(game: Game, **changes: Any) -> Game:
    """Return a copy of game with changes applied."""
    if "id" in changes:
        raise EntityValidationError("Game ID cannot be changed")
    updated = game._copy_with(**changes)
    if "current_player" in changes and updated.current_player is not None:
        if get_game_player(updated, updated.current_player) is None:
            raise EntityValidationError("Current player not found in game")
    return updated


# =============================================================================
# Lookups
# =============================================================================

def all_zones(game: Game) -> tuple[Zone, ...]:
    """Zone list plus the stack."""
    return game.zones + (game.stack,)


def get_game_player(game: Game, player_id: PlayerId) -> Player | None:
    for player in game.players:
        if player.id == player_id:
            return player
    return None


def get_game_card(game: Game, card_id: CardId) -> Card | None:
    for card in game.cards:
        if card.id == card_id:
            return card
    return None


def get_game_zone(game: Game, zone_id: ZoneId) -> Zone | None:
    """Find a zone by id, including the stack."""
    if game.stack.id == zone_id:
        return game.stack
    for zone in game.zones:
        if zone.id == zone_id:
            return zone
    return None


def find_player_zone(game: Game, player_id: PlayerId, zone_type: ZoneType) -> Zone | None:
    """First zone of zone_type owned by player_id."""
    for zone in game.zones:
        if zone.owner == player_id and zone.zone_type is zone_type:
            return zone
    return None


def find_zones_containing(game: Game, card_id: CardId) -> list[Zone]:
    return [z for z in all_zones(game) if card_id in z.cards]


# =============================================================================
# Entity replacement
# =============================================================================

def replace_player(game: Game, player: Player) -> Game:
    return game._copy_with(players=tuple(player if p.id == player.id else p for p in game.players))


def replace_card(game: Game, card: Card) -> Game:
    return game._copy_with(cards=tuple(card if c.id == card.id else c for c in game.cards))


def replace_zone(game: Game, zone: Zone) -> Game:
    """Swap in an updated zone; the stack id routes to the stack slot."""
    if zone.id == game.stack.id:
        return game._copy_with(stack=zone)
    return game._copy_with(zones=tuple(zone if z.id == zone.id else z for z in game.zones))


# =============================================================================
# Collections
# =============================================================================

# Removal is shallow: entities that still point at a removed player, card or
# zone are left as they are. Callers that need a consistent game remove the
# dependents first or check validate_references afterwards.

def add_player_to_game(game: Game, player: Player) -> Game:
    validate_player(player)
    if get_game_player(game, player.id) is not None:
        raise EntityValidationError("Player already in game")
    return game._copy_with(players=game.players + (player,))


def remove_player_from_game(game: Game, player_id: PlayerId) -> Game:
    """Drop a player; their zones and cards keep naming them as owner."""
    if get_game_player(game, player_id) is None:
        raise EntityValidationError("Player not found in game")
    changes: dict[str, Any] = {"players": tuple(p for p in game.players if p.id != player_id)}
    if game.current_player == player_id:
        changes["current_player"] = None
    return game._copy_with(**changes)


def add_card_to_game(game: Game, card: Card) -> Game:
    validate_card(card)
    if get_game_card(game, card.id) is not None:
        raise EntityValidationError("Card already in game")
    return game._copy_with(cards=game.cards + (card,))


def remove_card_from_game(game: Game, card_id: CardId) -> Game:
    """Drop a card; zones that list it are not touched."""
    if get_game_card(game, card_id) is None:
        raise EntityValidationError("Card not found in game")
    return game._copy_with(cards=tuple(c for c in game.cards if c.id != card_id))


def add_zone_to_game(game: Game, zone: Zone) -> Game:
    validate_zone(zone)
    if get_game_zone(game, zone.id) is not None:
        raise EntityValidationError("Zone already in game")
    return game._copy_with(zones=game.zones + (zone,))


def remove_zone_from_game(game: Game, zone_id: ZoneId) -> Game:
    """Drop a zone; cards inside it keep it as their current zone."""
    if zone_id == game.stack.id:
        raise EntityValidationError("Cannot remove the stack")
    if get_game_zone(game, zone_id) is None:
        raise EntityValidationError("Zone not found in game")
    return game._copy_with(zones=tuple(z for z in game.zones if z.id != zone_id))


# =============================================================================
# Turn order and phases
# =============================================================================

def set_current_player(game: Game, player_id: PlayerId) -> Game:
    if get_game_player(game, player_id) is None:
        raise EntityValidationError("Player not found in game")
    return game._copy_with(current_player=player_id)


def next_player(game: Game) -> Game:
    """Pass the turn to the next player in seating order."""
    if not game.players:
        return game

    ids = [p.id for p in game.players]
    if game.current_player not in ids:
        return game._copy_with(current_player=ids[0])

    index = ids.index(game.current_player)
    return game._copy_with(current_player=ids[(index + 1) % len(ids)])


def set_game_phase(game: Game, phase: str) -> Game:
    if not isinstance(phase, str) or not phase:
        raise EntityValidationError("Phase must be a non-empty string")
    return game._copy_with(phase=phase)


def advance_game_phase(game: Game) -> Game:
    """Move to the next standard phase; unknown phases restart the cycle."""
    if game.phase not in GAME_PHASES:
        return set_game_phase(game, GAME_PHASES[0])
    index = GAME_PHASES.index(game.phase)
    return set_game_phase(game, GAME_PHASES[(index + 1) % len(GAME_PHASES)])


def increment_turn_number(game: Game) -> Game:
    return game._copy_with(turn_number=game.turn_number + 1)


def start_game(game: Game) -> Game:
    if not game.players:
        raise EntityValidationError("Cannot start game with no players")
    return game._copy_with(phase="main", turn_number=1, current_player=game.players[0].id)


def reset_game(game: Game) -> Game:
    """Empty the game back to setup, keeping its id and listeners."""
    from ..events.manager import clear_event_queue

    return game._copy_with(
        players=(),
        zones=(),
        cards=(),
        current_player=None,
        phase="setup",
        turn_number=0,
        stack=create_stack(create_zone_id()),
        global_properties={},
        event_manager=clear_event_queue(game.event_manager),
    )


def get_current_player(game: Game) -> Player | None:
    if game.current_player is None:
        return None
    return get_game_player(game, game.current_player)


def players_in_turn_order(game: Game) -> list[Player]:
    """Players starting from the current player."""
    players = list(game.players)
    ids = [p.id for p in players]
    if game.current_player not in ids:
        return players
    index = ids.index(game.current_player)
    return players[index:] + players[:index]


def is_game_active(game: Game) -> bool:
    return (
        bool(game.players)
        and game.current_player is not None
        and game.phase not in ("setup", "ended")
    )


# =============================================================================
# Global properties
# =============================================================================

def set_global_property(game: Game, key: str, value: Any) -> Game:
    return game._copy_with(global_properties={**game.global_properties, key: value})


def get_global_property(game: Game, key: str, default: Any = None) -> Any:
    return game.global_properties.get(key, default)


def remove_global_property(game: Game, key: str) -> Game:
    remaining = {k: v for k, v in game.global_properties.items() if k != key}
    return game._copy_with(global_properties=remaining)


def game_summary(game: Game) -> dict[str, Any]:
    return {
        "player_count": len(game.players),
        "card_count": len(game.cards),
        "zone_count": len(game.zones),
        "current_phase": game.phase,
        "turn_number": game.turn_number,
        "is_active": is_game_active(game),
    }
