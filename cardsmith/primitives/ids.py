"""
Identifier Factory - Typed, opaque identifiers.

Each entity kind has its own identifier class. Two identifiers are equal
only when both the kind and the underlying value match, so a CardId can
never stand in for a ZoneId even though both wrap a string.
"""

from __future__ import annotations
from dataclasses import dataclass
import uuid


@dataclass(frozen=True)
class Identifier:
    """Base for typed identifiers. Compare by kind and value."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GameId(Identifier):
    pass


@dataclass(frozen=True)
class PlayerId(Identifier):
    pass


@dataclass(frozen=True)
class CardId(Identifier):
    pass


@dataclass(frozen=True)
class ZoneId(Identifier):
    pass


@dataclass(frozen=True)
class ListenerId(Identifier):
    pass


@dataclass(frozen=True)
class EventId(Identifier):
    pass


def _new_value() -> str:
    return str(uuid.uuid4())


def create_game_id() -> GameId:
    return GameId(_new_value())


def create_player_id() -> PlayerId:
    return PlayerId(_new_value())


def create_card_id() -> CardId:
    return CardId(_new_value())


def create_zone_id() -> ZoneId:
    return ZoneId(_new_value())


def create_listener_id() -> ListenerId:
    return ListenerId(_new_value())


def create_event_id() -> EventId:
    return EventId(_new_value())


def is_valid_id(obj: object, kind: type[Identifier] | None = None) -> bool:
    """
    Check that obj is an identifier with a non-empty string value.

    Args:
        obj: Object to check
        kind: Optional identifier class the object must be an instance of
    """
    expected = kind or Identifier
    if not isinstance(obj, expected):
        return False
    return isinstance(obj.value, str) and len(obj.value) > 0
