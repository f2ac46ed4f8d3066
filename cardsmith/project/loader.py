"""
Project Loader - Rebuild a playable Game from a project record.

Loading:
1. Seats players (player1..playerN) from the player count and zone owners
2. Creates zones from templates ("each" templates once per player)
3. Creates cards and deals them round-robin into the owners' decks
4. Compiles the project's rules and subscribes them
5. Optionally shuffles decks and deals opening hands via the action library

Every entity goes through its validating constructor, since the record
is untrusted.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Mapping
import logging
import random
import re

from ..actions import Action, can_execute_action, execute_action
from ..errors import EntityValidationError
from ..primitives.card import Card, create_card
from ..primitives.game import Game, create_game, find_player_zone, start_game
from ..primitives.ids import CardId, PlayerId, ZoneId, create_game_id
from ..primitives.player import Player, create_player
from ..primitives.zone import (
    Visibility,
    Zone,
    ZoneType,
    add_card_to_zone,
    create_deck,
    create_discard_pile,
    create_hand,
    create_play_area,
    create_stack,
    is_zone_full,
)
from ..rules.compiler import CompiledRule, RuleCompiler, register_rules
from ..rules.definition import RuleDefinition
from .schemas import DealingRules, ProjectRecord, RuleGraph, ZoneKind, ZoneTemplate

logger = logging.getLogger(__name__)

EACH = "each"
SHARED = ("shared", None, "")
_SEAT = re.compile(r"^player(\d+)$")

DEFAULT_ZONES = (
    ZoneTemplate(id="deck", name="Deck", type=ZoneKind.DECK, owner=EACH, max_size=60),
    ZoneTemplate(id="hand", name="Hand", type=ZoneKind.HAND, owner=EACH, max_size=7),
    ZoneTemplate(id="play-area", name="Play Area", type=ZoneKind.PLAY_AREA, owner=EACH),
    ZoneTemplate(id="discard", name="Discard Pile", type=ZoneKind.DISCARD, owner=EACH),
)

_FACTORIES = {
    ZoneKind.DECK: create_deck,
    ZoneKind.HAND: create_hand,
    ZoneKind.DISCARD: create_discard_pile,
    ZoneKind.PLAY_AREA: create_play_area,
}


@dataclass
class LoadedProject:
    """A ready-to-play game plus what went into it."""
    game: Game
    rules: list[CompiledRule] = field(default_factory=list)
    log: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def build_game(
    project: ProjectRecord | Mapping[str, Any],
    rng: random.Random | None = None,
    compiler: RuleCompiler | None = None,
) -> LoadedProject:
    """
    Build a Game from a project record.

    Args:
        project: Project record (or its raw dict form)
        rng: Random source for deck shuffles; pass a seeded one for replays
        compiler: Rule compiler to use

    Raises:
        pydantic.ValidationError: the raw record is malformed
        EntityValidationError: the record describes an impossible game
    """
    if not isinstance(project, ProjectRecord):
        project = ProjectRecord.model_validate(project)
    config = project.config()
    result = LoadedProject(game=None)

    templates = list(project.zones) or list(DEFAULT_ZONES)
    seats = _seats(templates, config.player_count.min)
    zones: list[Zone] = []
    stack: Zone | None = None
    owned: dict[str, list[ZoneId]] = {seat: [] for seat in seats}
    for template in templates:
        for seat, zone in _zones_from_template(template, seats):
            if zone.zone_type is ZoneType.STACK and stack is None and seat is None:
                stack = zone
                continue
            zones.append(zone)
            if seat is not None:
                owned[seat].append(zone.id)

    cards, zones = _deal_cards_to_decks(project, seats, zones, result)

    game = create_game(
        id=create_game_id(),
        players=[
            create_player(
                PlayerId(seat),
                f"Player {_SEAT.match(seat).group(1)}",
                resources=config.initial_setup.player_resources,
                zones=owned[seat],
            )
            for seat in seats
        ],
        zones=zones,
        cards=cards,
        stack=stack,
    )
    game = start_game(game)
    result.log.append(f"Seated {len(seats)} player(s) with {len(zones)} zone(s) and {len(cards)} card(s)")

    compiler = compiler or RuleCompiler()
    result.rules = compiler.compile_rules(project_rules(project))
    game = register_rules(game, result.rules)
    if result.rules:
        result.log.append(f"Compiled {len(result.rules)} rule(s)")

    game = _deal_opening_hands(game, config.initial_setup.dealing_rules, rng, result)
    result.game = game
    return result


def project_rules(project: ProjectRecord) -> list[RuleDefinition]:
    """Rule definitions from both graph and flat rule entries."""
    rules: list[RuleDefinition] = []
    for entry in project.rules:
        if isinstance(entry, RuleGraph):
            rules.extend(entry.to_definitions())
        else:
            rules.append(entry.to_definition())
    return rules


# =============================================================================
# Seats and zones
# =============================================================================

def _seats(templates: list[ZoneTemplate], minimum: int) -> list[str]:
    """player1..player<minimum> plus any seat named by a zone owner."""
    numbers = set(range(1, minimum + 1))
    for template in templates:
        match = _SEAT.match(template.owner or "")
        if match:
            numbers.add(int(match.group(1)))
    return [f"player{n}" for n in sorted(numbers)]


def _zones_from_template(template: ZoneTemplate, seats: list[str]) -> list[tuple[str | None, Zone]]:
    if template.owner == EACH:
        return [
            (seat, _make_zone(template, ZoneId(f"{template.id}-{seat}"), PlayerId(seat)))
            for seat in seats
        ]
    if template.owner in SHARED:
        return [(None, _make_zone(template, ZoneId(template.id), None))]
    if template.owner in seats:
        return [(template.owner, _make_zone(template, ZoneId(template.id), PlayerId(template.owner)))]
    raise EntityValidationError(f"Zone '{template.id}' has unknown owner '{template.owner}'")


def _make_zone(template: ZoneTemplate, zone_id: ZoneId, owner: PlayerId | None) -> Zone:
    """
    Build a zone with its type's defaults. The template may rename it,
    bound it, and change its visibility; ordering always follows the type.
    """
    if template.type is ZoneKind.STACK and owner is None:
        zone = create_stack(zone_id, name=template.name)
    else:
        # A player-owned stack plays like a play area
        factory = _FACTORIES.get(template.type, create_play_area)
        zone = factory(zone_id, owner, max_size=template.max_size, name=template.name)

    if template.visibility is not None:
        zone = replace(zone, visibility=Visibility(template.visibility))
    return zone


# =============================================================================
# Cards
# =============================================================================

def _deal_cards_to_decks(
    project: ProjectRecord,
    seats: list[str],
    zones: list[Zone],
    result: LoadedProject,
) -> tuple[list[Card], list[Zone]]:
    """Create the project's cards, alternating owners, each in its owner's deck."""
    by_id = {z.id: z for z in zones}
    cards: list[Card] = []
    used: set[str] = set()

    for index, doc in enumerate(project.cards):
        seat = seats[index % len(seats)]
        owner = PlayerId(seat)
        home = _home_zone(by_id.values(), owner)
        if home is None:
            raise EntityValidationError(f"No zone can hold card '{doc.name}' for {seat}")

        card_id = _unique_card_id(doc.id or f"card-{index + 1}", used)
        properties = {"cost": doc.cost, "power": doc.power, "toughness": doc.toughness, **doc.properties}
        cards.append(
            create_card(card_id, doc.name, doc.text, doc.type, owner, home.id, properties=properties)
        )
        by_id[home.id] = add_card_to_zone(home, card_id)

    if cards:
        result.log.append(f"Placed {len(cards)} card(s) in player decks")
    return cards, [by_id[z.id] for z in zones]


def _home_zone(zones, owner: PlayerId) -> Zone | None:
    """The owner's deck with room, else any owned zone with room."""
    owned = [z for z in zones if z.owner == owner and not is_zone_full(z)]
    for zone in owned:
        if zone.zone_type is ZoneType.DECK:
            return zone
    return owned[0] if owned else None


def _unique_card_id(base: str, used: set[str]) -> CardId:
    candidate = base
    copy = 1
    while candidate in used:
        copy += 1
        candidate = f"{base}#{copy}"
    used.add(candidate)
    return CardId(candidate)


# =============================================================================
# Opening hands
# =============================================================================

def _deal_opening_hands(
    game: Game,
    dealing: DealingRules,
    rng: random.Random | None,
    result: LoadedProject,
) -> Game:
    if not dealing.enabled or dealing.hand_size <= 0:
        return game

    players: list[Player] = list(game.players)
    if dealing.shuffle_deck:
        for player in players:
            deck = find_player_zone(game, player.id, ZoneType.DECK)
            if deck is not None and deck.cards:
                game = execute_action(game, Action.shuffle_zone(deck.id, player.id), rng)
        result.log.append("Shuffled all player decks")

    if dealing.dealing_order == "round-robin":
        exhausted: set[PlayerId] = set()
        for _ in range(dealing.hand_size):
            for player in players:
                if player.id in exhausted:
                    continue
                game = _draw_one(game, player, exhausted, result)
    else:
        for player in players:
            exhausted = set()
            for _ in range(dealing.hand_size):
                game = _draw_one(game, player, exhausted, result)
                if player.id in exhausted:
                    break

    result.log.append(f"Dealt up to {dealing.hand_size} card(s) to each player ({dealing.dealing_order})")
    return game


def _draw_one(game: Game, player: Player, exhausted: set[PlayerId], result: LoadedProject) -> Game:
    draw = Action.draw_cards(player.id, 1)
    if not can_execute_action(game, draw):
        exhausted.add(player.id)
        result.warnings.append(f"Stopped dealing to {player.name}: cannot draw")
        logger.info("Stopped dealing to %s", player.id)
        return game
    return execute_action(game, draw)
