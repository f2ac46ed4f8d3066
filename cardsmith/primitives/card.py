"""
Card Primitive - Immutable card entity.

A card knows its owner and the zone it currently sits in. Keeping
current_zone consistent with the zone's card list is the job of the
action library; this module only offers node-level operations.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any

from ..errors import EntityValidationError
from .counters import (
    Counter,
    add_counter,
    remove_counter,
    get_counter_count,
    validate_counters,
)
from .ids import CardId, PlayerId, ZoneId, is_valid_id


@dataclass(frozen=True)
class Card:
    """
    A card instance in a game.

    properties holds arbitrary named values (mana cost, power, ...).
    The dict is never mutated in place; updates copy it.
    """
    id: CardId
    name: str
    text: str
    type: str
    owner: PlayerId
    current_zone: ZoneId
    properties: dict[str, Any] = field(default_factory=dict)
    counters: tuple[Counter, ...] = ()
    is_tapped: bool = False


def create_card(
    id: CardId,
    name: str,
    text: str,
    type: str,
    owner: PlayerId,
    current_zone: ZoneId,
    properties: dict[str, Any] | None = None,
    counters: list[Counter] | tuple[Counter, ...] | None = None,
    is_tapped: bool = False,
) -> Card:
    """Create a card, validating every field."""
    card = Card(
        id=id,
        name=name,
        text=text,
        type=type,
        owner=owner,
        current_zone=current_zone,
        properties=dict(properties) if properties is not None else {},
        counters=tuple(counters) if counters is not None else (),
        is_tapped=is_tapped,
    )
    validate_card(card)
    return card


def validate_card(card: Any) -> None:
    """Raise EntityValidationError unless card is a well-formed Card."""
    if not isinstance(card, Card):
        raise EntityValidationError("Card must be a Card")
    if not is_valid_id(card.id, CardId):
        raise EntityValidationError("Invalid card ID")
    if not isinstance(card.name, str) or not card.name.strip():
        raise EntityValidationError("Card name cannot be empty")
    if not isinstance(card.text, str):
        raise EntityValidationError("Card text must be a string")
    if not isinstance(card.type, str) or not card.type.strip():
        raise EntityValidationError("Card type must be a non-empty string")
    if not is_valid_id(card.owner, PlayerId):
        raise EntityValidationError("Invalid owner ID")
    if not is_valid_id(card.current_zone, ZoneId):
        raise EntityValidationError("Invalid zone ID")
    if not isinstance(card.properties, dict):
        raise EntityValidationError("Properties must be a dict")
    validate_counters(card.counters)
    if not isinstance(card.is_tapped, bool):
        raise EntityValidationError("is_tapped must be a boolean")


def update_card(card: Card, **changes: Any) -> Card:
    """Return a copy of card with changes applied. The id cannot change."""
    if "id" in changes:
        raise EntityValidationError("Card ID cannot be changed")
    return replace(card, **changes)


def add_card_counter(card: Card, counter: Counter) -> Card:
    return update_card(card, counters=add_counter(card.counters, counter))


def remove_card_counter(card: Card, counter: Counter) -> Card:
    return update_card(card, counters=remove_counter(card.counters, counter))


def tap_card(card: Card) -> Card:
    return update_card(card, is_tapped=True)


def untap_card(card: Card) -> Card:
    return update_card(card, is_tapped=False)


def set_card_property(card: Card, key: str, value: Any) -> Card:
    return update_card(card, properties={**card.properties, key: value})


def get_card_property(card: Card, key: str, default: Any = None) -> Any:
    return card.properties.get(key, default)


def remove_card_property(card: Card, key: str) -> Card:
    remaining = {k: v for k, v in card.properties.items() if k != key}
    return update_card(card, properties=remaining)


def get_card_counter_count(card: Card, counter_type: str) -> int:
    return get_counter_count(card.counters, counter_type)


def has_counter(card: Card, counter_type: str) -> bool:
    return get_card_counter_count(card, counter_type) > 0


def card_power(card: Card) -> int:
    """Base power plus +1/+1 counters."""
    return (get_card_property(card, "power") or 0) + get_card_counter_count(card, "+1/+1")


def card_toughness(card: Card) -> int:
    """Base toughness plus +1/+1 counters."""
    return (get_card_property(card, "toughness") or 0) + get_card_counter_count(card, "+1/+1")


def is_card_type(card: Card, type_name: str) -> bool:
    """Case-insensitive substring match on the type line."""
    return type_name.lower() in card.type.lower()


def copy_card(card: Card, new_id: CardId) -> Card:
    """Copy a card under a new identifier."""
    if not is_valid_id(new_id, CardId):
        raise EntityValidationError("Invalid card ID")
    return replace(card, id=new_id, properties=dict(card.properties))
