"""
Zone Primitive - Containers of card identifiers.

A zone holds an ordered list of card ids plus visibility, ordering and
capacity rules. The specialised kinds (deck, hand, discard pile, play area,
stack) share the same shape and differ only in defaults and zone_type.

The "top" of a zone is the end of its card list.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any
import random

from ..errors import EntityValidationError
from .ids import CardId, PlayerId, ZoneId, is_valid_id


class Visibility(Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class CardOrder(Enum):
    ORDERED = "ordered"
    UNORDERED = "unordered"


class ZoneType(Enum):
    """Discriminant for the specialised zone kinds."""
    GENERIC = "zone"
    DECK = "deck"
    HAND = "hand"
    DISCARD = "discard"
    PLAY_AREA = "playarea"
    STACK = "stack"


@dataclass(frozen=True)
class Zone:
    """
    A named container of card ids.

    owner is None for shared zones. max_size None means unbounded.
    """
    id: ZoneId
    name: str
    owner: PlayerId | None
    visibility: Visibility
    order: CardOrder
    cards: tuple[CardId, ...] = ()
    max_size: int | None = None
    zone_type: ZoneType = ZoneType.GENERIC

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return len(self.cards) == 0


def _coerce_enum(enum_cls: type[Enum], value: Any, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise EntityValidationError(f"Invalid {label} value") from None


def create_zone(
    id: ZoneId,
    name: str,
    owner: PlayerId | None,
    visibility: Visibility | str,
    order: CardOrder | str,
    cards: list[CardId] | tuple[CardId, ...] | None = None,
    max_size: int | None = None,
    zone_type: ZoneType | str = ZoneType.GENERIC,
) -> Zone:
    """Create a zone, validating every field. Enum fields accept their string values."""
    zone = Zone(
        id=id,
        name=name,
        owner=owner,
        visibility=_coerce_enum(Visibility, visibility, "visibility"),
        order=_coerce_enum(CardOrder, order, "order"),
        cards=tuple(cards) if cards is not None else (),
        max_size=max_size,
        zone_type=_coerce_enum(ZoneType, zone_type, "zone type"),
    )
    validate_zone(zone)
    return zone


def validate_zone(zone: Any) -> None:
    """Raise EntityValidationError unless zone is a well-formed Zone."""
    if not isinstance(zone, Zone):
        raise EntityValidationError("Zone must be a Zone")
    if not is_valid_id(zone.id, ZoneId):
        raise EntityValidationError("Invalid zone ID")
    if not isinstance(zone.name, str) or not zone.name.strip():
        raise EntityValidationError("Zone name cannot be empty")
    if zone.owner is not None and not is_valid_id(zone.owner, PlayerId):
        raise EntityValidationError("Invalid owner ID")
    if not isinstance(zone.visibility, Visibility):
        raise EntityValidationError("Invalid visibility value")
    if not isinstance(zone.order, CardOrder):
        raise EntityValidationError("Invalid order value")
    if not isinstance(zone.zone_type, ZoneType):
        raise EntityValidationError("Invalid zone type value")
    if zone.max_size is not None:
        if isinstance(zone.max_size, bool) or not isinstance(zone.max_size, int) or zone.max_size < 0:
            raise EntityValidationError("Invalid max size")
    if not isinstance(zone.cards, tuple):
        raise EntityValidationError("Cards must be a sequence")
    for index, card_id in enumerate(zone.cards):
        if not is_valid_id(card_id, CardId):
            raise EntityValidationError(f"Invalid card ID in zone at index {index}")
    if len(set(zone.cards)) != len(zone.cards):
        raise EntityValidationError("Duplicate card ID in zone")
    if zone.max_size is not None and len(zone.cards) > zone.max_size:
        raise EntityValidationError("Zone holds more cards than its max size")


# =============================================================================
# Specialised zones
# =============================================================================

def create_deck(
    id: ZoneId,
    owner: PlayerId,
    cards: list[CardId] | tuple[CardId, ...] | None = None,
    max_size: int | None = None,
    name: str = "Deck",
) -> Zone:
    return create_zone(id, name, owner, Visibility.PRIVATE, CardOrder.ORDERED,
                       cards=cards, max_size=max_size, zone_type=ZoneType.DECK)


def create_hand(
    id: ZoneId,
    owner: PlayerId,
    cards: list[CardId] | tuple[CardId, ...] | None = None,
    max_size: int | None = None,
    name: str = "Hand",
) -> Zone:
    return create_zone(id, name, owner, Visibility.PRIVATE, CardOrder.UNORDERED,
                       cards=cards, max_size=max_size, zone_type=ZoneType.HAND)


def create_discard_pile(
    id: ZoneId,
    owner: PlayerId,
    cards: list[CardId] | tuple[CardId, ...] | None = None,
    max_size: int | None = None,
    name: str = "Discard Pile",
) -> Zone:
    return create_zone(id, name, owner, Visibility.PUBLIC, CardOrder.ORDERED,
                       cards=cards, max_size=max_size, zone_type=ZoneType.DISCARD)


def create_play_area(
    id: ZoneId,
    owner: PlayerId,
    cards: list[CardId] | tuple[CardId, ...] | None = None,
    max_size: int | None = None,
    name: str = "Play Area",
) -> Zone:
    return create_zone(id, name, owner, Visibility.PUBLIC, CardOrder.UNORDERED,
                       cards=cards, max_size=max_size, zone_type=ZoneType.PLAY_AREA)


def create_stack(
    id: ZoneId,
    cards: list[CardId] | tuple[CardId, ...] | None = None,
    name: str = "Stack",
) -> Zone:
    """The shared effect stack."""
    return create_zone(id, name, None, Visibility.PUBLIC, CardOrder.ORDERED,
                       cards=cards, zone_type=ZoneType.STACK)


# =============================================================================
# Card list operations
# =============================================================================

def is_zone_full(zone: Zone) -> bool:
    return zone.max_size is not None and len(zone.cards) >= zone.max_size


def remaining_capacity(zone: Zone) -> int | None:
    """Free slots, or None when the zone is unbounded."""
    if zone.max_size is None:
        return None
    return max(0, zone.max_size - len(zone.cards))


def has_card(zone: Zone, card_id: CardId) -> bool:
    return card_id in zone.cards


def find_card_in_zone(zone: Zone, card_id: CardId) -> int:
    """Index of card_id, or -1."""
    try:
        return zone.cards.index(card_id)
    except ValueError:
        return -1


def add_card_to_zone(zone: Zone, card_id: CardId, position: int | None = None) -> Zone:
    """
    Return zone with card_id inserted at position (default: appended on top).

    Raises:
        EntityValidationError: zone at capacity, invalid id, or card already present
    """
    if is_zone_full(zone):
        raise EntityValidationError("Zone is at maximum capacity")
    if not is_valid_id(card_id, CardId):
        raise EntityValidationError("Invalid card ID")
    if card_id in zone.cards:
        raise EntityValidationError("Card already in zone")

    cards = list(zone.cards)
    if position is None:
        cards.append(card_id)
    else:
        cards.insert(position, card_id)
    return replace(zone, cards=tuple(cards))


def remove_card_from_zone(zone: Zone, card_id: CardId) -> Zone:
    index = find_card_in_zone(zone, card_id)
    if index == -1:
        raise EntityValidationError("Card not found in zone")
    return replace(zone, cards=zone.cards[:index] + zone.cards[index + 1:])


def move_card_in_zone(zone: Zone, card_id: CardId, new_position: int) -> Zone:
    """Reposition a card already in the zone."""
    index = find_card_in_zone(zone, card_id)
    if index == -1:
        raise EntityValidationError("Card not found in zone")
    if new_position < 0 or new_position >= len(zone.cards):
        raise EntityValidationError("Invalid position")

    cards = list(zone.cards)
    moved = cards.pop(index)
    cards.insert(new_position, moved)
    return replace(zone, cards=tuple(cards))


def shuffle_zone(zone: Zone, rng: random.Random | None = None) -> Zone:
    """
    Return zone with its cards in a uniformly random order.

    Only ordered zones can be shuffled.
    """
    if zone.order is CardOrder.UNORDERED:
        raise EntityValidationError("Cannot shuffle unordered zone")

    cards = list(zone.cards)
    (rng or random).shuffle(cards)
    return replace(zone, cards=tuple(cards))


def draw_cards_from_zone(
    zone: Zone, count: int, from_top: bool = True
) -> tuple[tuple[CardId, ...], Zone]:
    """
    Take count cards from the top (end) or bottom (start) of the zone.

    Returns (drawn card ids in their original relative order, reduced zone).
    """
    if count < 0:
        raise EntityValidationError("Cannot draw negative number of cards")
    if count > len(zone.cards):
        raise EntityValidationError("Not enough cards in zone")
    if count == 0:
        return (), zone

    if from_top:
        drawn, remaining = zone.cards[-count:], zone.cards[:-count]
    else:
        drawn, remaining = zone.cards[:count], zone.cards[count:]
    return drawn, replace(zone, cards=remaining)


def peek_at_cards(zone: Zone, count: int, from_top: bool = True) -> tuple[CardId, ...]:
    """Look at up to count cards without removing them."""
    if count < 0:
        raise EntityValidationError("Cannot peek at negative number of cards")
    if count >= len(zone.cards):
        return zone.cards
    if count == 0:
        return ()
    return zone.cards[-count:] if from_top else zone.cards[:count]


def insert_card_at_top(zone: Zone, card_id: CardId) -> Zone:
    return add_card_to_zone(zone, card_id, len(zone.cards))


def insert_card_at_bottom(zone: Zone, card_id: CardId) -> Zone:
    return add_card_to_zone(zone, card_id, 0)


def top_card(zone: Zone) -> CardId | None:
    return zone.cards[-1] if zone.cards else None


def bottom_card(zone: Zone) -> CardId | None:
    return zone.cards[0] if zone.cards else None


# =============================================================================
# Kind predicates
# =============================================================================

def is_deck(zone: Zone) -> bool:
    return zone.zone_type is ZoneType.DECK


def is_hand(zone: Zone) -> bool:
    return zone.zone_type is ZoneType.HAND


def is_discard_pile(zone: Zone) -> bool:
    return zone.zone_type is ZoneType.DISCARD


def is_play_area(zone: Zone) -> bool:
    return zone.zone_type is ZoneType.PLAY_AREA


def is_stack(zone: Zone) -> bool:
    return zone.zone_type is ZoneType.STACK
