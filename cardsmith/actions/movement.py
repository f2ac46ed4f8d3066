"""
Card Movement Handlers - move, draw, play, discard, shuffle, view.

Every handler comes as a pair:
    _check_<kind>(game, payload) -> error message or None
    _apply_<kind>(game, action, rng) -> Transition

The reducer always runs the check before the apply, so apply functions
may assume every lookup succeeds.
"""

from __future__ import annotations
from dataclasses import replace
import random

from ..events.event import EventTypes
from ..primitives.card import Card
from ..primitives.game import (
    Game,
    add_zone_to_game,
    find_player_zone,
    get_game_card,
    get_game_player,
    get_game_zone,
    replace_card,
    replace_player,
    replace_zone,
)
from ..primitives.ids import CardId, Identifier, PlayerId, ZoneId, create_zone_id, is_valid_id
from ..primitives.player import add_player_zone, get_player_resource, spend_player_mana
from ..primitives.zone import (
    CardOrder,
    Visibility,
    Zone,
    ZoneType,
    add_card_to_zone,
    create_discard_pile,
    create_play_area,
    draw_cards_from_zone,
    has_card,
    is_zone_full,
    peek_at_cards,
    remaining_capacity,
    remove_card_from_zone,
    shuffle_zone,
)
from .action import Action, ActionPayload, Transition
from .support import entity_exists, is_count, raise_event, zone_label

# Card property holding the mana cost of playing the card. Absent means free.
MANA_COST_PROPERTY = "manaCost"
MANA_RESOURCE = "mana"


def _relocate(game: Game, card: Card, source: Zone, destination: Zone, position: int | None = None) -> Game:
    """Take card out of source and put it into destination, updating current_zone."""
    source = remove_card_from_zone(source, card.id)
    game = replace_zone(game, source)
    if destination.id == source.id:
        destination = source
    destination = add_card_to_zone(destination, card.id, position)
    game = replace_zone(game, destination)
    return replace_card(game, replace(card, current_zone=destination.id))


def _ensure_player_zone(game: Game, player_id: PlayerId, zone_type: ZoneType) -> tuple[Game, Zone]:
    """Return the player's zone of zone_type, creating and registering it if absent."""
    zone = find_player_zone(game, player_id, zone_type)
    if zone is not None:
        return game, zone

    factory = create_play_area if zone_type is ZoneType.PLAY_AREA else create_discard_pile
    zone = factory(create_zone_id(), player_id)
    game = add_zone_to_game(game, zone)
    player = get_game_player(game, player_id)
    game = replace_player(game, add_player_zone(player, zone.id))
    return game, zone


def _check_card_in_hand(game: Game, payload: ActionPayload) -> str | None:
    """Shared preconditions of play and discard."""
    if not is_valid_id(payload.player_id, PlayerId):
        return "Invalid player ID"
    if not is_valid_id(payload.card_id, CardId):
        return "Invalid card ID"
    if get_game_player(game, payload.player_id) is None:
        return "Player not found"
    card = get_game_card(game, payload.card_id)
    if card is None:
        return "Card not found"
    if card.owner != payload.player_id:
        return "Player does not own this card"
    hand = find_player_zone(game, payload.player_id, ZoneType.HAND)
    if hand is None:
        return "Player hand not found"
    if not has_card(hand, card.id):
        return "Card not in hand"
    return None


def _destination_full(game: Game, player_id: PlayerId, zone_type: ZoneType) -> bool:
    zone = find_player_zone(game, player_id, zone_type)
    return zone is not None and is_zone_full(zone)


# =============================================================================
# Move card
# =============================================================================

def _check_move_card(game: Game, payload: ActionPayload) -> str | None:
    if not is_valid_id(payload.card_id, CardId):
        return "Invalid card ID"
    if not is_valid_id(payload.from_zone, ZoneId) or not is_valid_id(payload.to_zone, ZoneId):
        return "Invalid zone ID"

    card = get_game_card(game, payload.card_id)
    if card is None:
        return "Card not found"
    source = get_game_zone(game, payload.from_zone)
    if source is None:
        return "Source zone not found"
    destination = get_game_zone(game, payload.to_zone)
    if destination is None:
        return "Destination zone not found"
    if not has_card(source, card.id):
        return "Card not found in source zone"

    same_zone = source.id == destination.id
    if not same_zone and is_zone_full(destination):
        return "Zone is at maximum capacity"

    if payload.position is not None:
        size = len(destination.cards) - (1 if same_zone else 0)
        if isinstance(payload.position, bool) or not isinstance(payload.position, int):
            return "Invalid position"
        if payload.position < 0 or payload.position > size:
            return "Invalid position"
    return None


def _apply_move_card(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    card = get_game_card(game, p.card_id)
    source = get_game_zone(game, p.from_zone)
    destination = get_game_zone(game, p.to_zone)

    game = _relocate(game, card, source, destination, p.position)
    event = raise_event(
        EventTypes.CARD_MOVED,
        card_id=card.id,
        from_zone=source.id,
        to_zone=destination.id,
        position=p.position,
    )
    return Transition(game, [event], [f"Moved {card.name} from {zone_label(source)} to {zone_label(destination)}"])


# =============================================================================
# Draw cards
# =============================================================================

def _check_draw_cards(game: Game, payload: ActionPayload) -> str | None:
    if not is_valid_id(payload.player_id, PlayerId):
        return "Invalid player ID"
    count = 1 if payload.count is None else payload.count
    if not is_count(count):
        return "Draw count must be a non-negative integer"
    if get_game_player(game, payload.player_id) is None:
        return "Player not found"

    deck = find_player_zone(game, payload.player_id, ZoneType.DECK)
    if deck is None:
        return "Player deck not found"
    hand = find_player_zone(game, payload.player_id, ZoneType.HAND)
    if hand is None:
        return "Player hand not found"
    if len(deck.cards) < count:
        return "Not enough cards in deck"

    room = remaining_capacity(hand)
    if room is not None and room < count:
        return "Hand is at maximum capacity"
    return None


def _apply_draw_cards(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    count = 1 if p.count is None else p.count
    deck = find_player_zone(game, p.player_id, ZoneType.DECK)
    hand = find_player_zone(game, p.player_id, ZoneType.HAND)

    drawn, deck = draw_cards_from_zone(deck, count, from_top=True)
    for card_id in drawn:
        hand = add_card_to_zone(hand, card_id)
        game = replace_card(game, replace(get_game_card(game, card_id), current_zone=hand.id))
    game = replace_zone(replace_zone(game, deck), hand)

    event = raise_event(
        EventTypes.CARDS_DRAWN,
        triggered_by=p.player_id,
        player_id=p.player_id,
        card_ids=list(drawn),
        count=len(drawn),
        from_zone=deck.id,
        to_zone=hand.id,
    )
    return Transition(game, [event], [f"{p.player_id} drew {len(drawn)} card(s)"])


# =============================================================================
# Play card
# =============================================================================

def mana_cost(card: Card) -> int:
    """Cost of playing card; a card without a cost is free."""
    return card.properties.get(MANA_COST_PROPERTY, 0)


def _check_play_card(game: Game, payload: ActionPayload) -> str | None:
    error = _check_card_in_hand(game, payload)
    if error:
        return error

    card = get_game_card(game, payload.card_id)
    cost = mana_cost(card)
    if not is_count(cost):
        return "Invalid mana cost"
    player = get_game_player(game, payload.player_id)
    if cost > 0 and get_player_resource(player, MANA_RESOURCE, 0) < cost:
        return "Insufficient mana"

    # Targets are only checked for existence; legality is up to listeners.
    for target in payload.targets:
        if not isinstance(target, Identifier) or not entity_exists(game, target):
            return "Target not found"

    if _destination_full(game, payload.player_id, ZoneType.PLAY_AREA):
        return "Zone is at maximum capacity"
    return None


def _apply_play_card(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    card = get_game_card(game, p.card_id)
    cost = mana_cost(card)
    changes = []

    if cost > 0:
        player = spend_player_mana(get_game_player(game, p.player_id), cost)
        game = replace_player(game, player)
        changes.append(f"{p.player_id} spent {cost} mana")

    game, play_area = _ensure_player_zone(game, p.player_id, ZoneType.PLAY_AREA)
    hand = find_player_zone(game, p.player_id, ZoneType.HAND)
    game = _relocate(game, card, hand, play_area)
    changes.append(f"{p.player_id} played {card.name}")

    event = raise_event(
        EventTypes.CARD_PLAYED,
        triggered_by=p.player_id,
        card_id=card.id,
        player_id=p.player_id,
        zone_id=play_area.id,
        card_name=card.name,
        card_type=card.type,
        mana_cost=cost,
        targets=list(p.targets),
    )
    return Transition(game, [event], changes)


# =============================================================================
# Discard card
# =============================================================================

def _check_discard_card(game: Game, payload: ActionPayload) -> str | None:
    error = _check_card_in_hand(game, payload)
    if error:
        return error
    if _destination_full(game, payload.player_id, ZoneType.DISCARD):
        return "Zone is at maximum capacity"
    return None


def _apply_discard_card(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    card = get_game_card(game, p.card_id)
    game, discard = _ensure_player_zone(game, p.player_id, ZoneType.DISCARD)
    hand = find_player_zone(game, p.player_id, ZoneType.HAND)
    game = _relocate(game, card, hand, discard)

    event = raise_event(
        EventTypes.CARD_DISCARDED,
        triggered_by=p.player_id,
        card_id=card.id,
        player_id=p.player_id,
        zone_id=discard.id,
    )
    return Transition(game, [event], [f"{p.player_id} discarded {card.name}"])


# =============================================================================
# Shuffle zone
# =============================================================================

def _check_shuffle_zone(game: Game, payload: ActionPayload) -> str | None:
    if not is_valid_id(payload.zone_id, ZoneId):
        return "Invalid zone ID"
    zone = get_game_zone(game, payload.zone_id)
    if zone is None:
        return "Zone not found"
    if zone.order is CardOrder.UNORDERED:
        return "Cannot shuffle unordered zone"

    if payload.player_id is not None:
        if get_game_player(game, payload.player_id) is None:
            return "Player not found"
        if zone.owner is not None and zone.owner != payload.player_id:
            return "Player does not own this zone"
    return None


def _apply_shuffle_zone(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    zone = shuffle_zone(get_game_zone(game, p.zone_id), rng)
    game = replace_zone(game, zone)

    event = raise_event(EventTypes.ZONE_SHUFFLED, triggered_by=p.player_id, zone_id=zone.id)
    return Transition(game, [event], [f"Shuffled {zone_label(zone)}"])


# =============================================================================
# View zone
# =============================================================================

def _check_view_zone(game: Game, payload: ActionPayload) -> str | None:
    if not is_valid_id(payload.player_id, PlayerId):
        return "Invalid player ID"
    if not is_valid_id(payload.zone_id, ZoneId):
        return "Invalid zone ID"
    if payload.count is not None and not is_count(payload.count):
        return "View count must be a non-negative integer"
    if get_game_player(game, payload.player_id) is None:
        return "Player not found"

    zone = get_game_zone(game, payload.zone_id)
    if zone is None:
        return "Zone not found"
    if zone.visibility is Visibility.PRIVATE and zone.owner != payload.player_id:
        return "Cannot view private zone"
    return None


def _apply_view_zone(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    zone = get_game_zone(game, p.zone_id)
    seen = zone.cards if p.count is None else peek_at_cards(zone, p.count)

    event = raise_event(
        EventTypes.ZONE_VIEWED,
        triggered_by=p.player_id,
        player_id=p.player_id,
        zone_id=zone.id,
        card_ids=list(seen),
    )
    return Transition(game, [event], [f"{p.player_id} viewed {len(seen)} card(s) in {zone_label(zone)}"])
