"""
Game Events - Short-lived, typed notifications.

Events are raised by actions and by listener reactions. They are consumed
during one processing pass and never stored as entities.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import time

from ..errors import EntityValidationError
from ..primitives.ids import EventId, PlayerId, create_event_id

SYSTEM = "system"


class EventTypes:
    """Event type tags raised by the engine itself."""
    CARD_MOVED = "CARD_MOVED"
    CARDS_DRAWN = "CARDS_DRAWN"
    CARD_PLAYED = "CARD_PLAYED"
    STAT_MODIFIED = "STAT_MODIFIED"
    CARD_TAPPED = "CARD_TAPPED"
    CARD_UNTAPPED = "CARD_UNTAPPED"
    CARD_DISCARDED = "CARD_DISCARDED"
    ZONE_SHUFFLED = "ZONE_SHUFFLED"
    COUNTER_ADDED = "COUNTER_ADDED"
    COUNTER_REMOVED = "COUNTER_REMOVED"
    PHASE_CHANGED = "PHASE_CHANGED"
    ZONE_VIEWED = "ZONE_VIEWED"
    TURN_START = "TURN_START"
    ACTION_ERROR = "ACTION_ERROR"

    # Suffix for events that ask the game loop to run an action
    REQUESTED_SUFFIX = "_REQUESTED"


@dataclass(frozen=True)
class GameEvent:
    """
    A typed notification.

    triggered_by is the originating player's id, or "system".
    """
    id: EventId
    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = 0.0
    triggered_by: PlayerId | str = SYSTEM

    @property
    def is_action_request(self) -> bool:
        return self.type.endswith(EventTypes.REQUESTED_SUFFIX) and "action" in self.payload


def create_game_event(
    event_type: str,
    payload: dict[str, Any] | None = None,
    triggered_by: PlayerId | str | None = None,
) -> GameEvent:
    """Create an event with a fresh id and the current time."""
    if not isinstance(event_type, str) or not event_type.strip():
        raise EntityValidationError("Event type cannot be empty")
    if payload is not None and not isinstance(payload, dict):
        raise EntityValidationError("Event payload must be a dict")

    return GameEvent(
        id=create_event_id(),
        type=event_type,
        payload=dict(payload or {}),
        timestamp=time.time(),
        triggered_by=triggered_by if triggered_by is not None else SYSTEM,
    )
