"""
Event Listener Registry - Subscribe and unsubscribe reactions.

A listener matches events by type, may filter them with a condition, and
reacts by returning zero or more new events. Lower priority runs first;
equal priorities keep registration order.

Reactions are plain callables ``reaction(event, game)``. Only the
declarative parts (event type, condition, priority) are meant to be
persisted; the rules package rebuilds reactions from those.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, TYPE_CHECKING

from ..errors import EntityValidationError
from ..primitives.ids import ListenerId, create_listener_id, is_valid_id
from .event import GameEvent

if TYPE_CHECKING:
    from ..primitives.game import Game
    from .manager import EventManager

Reaction = Callable[[GameEvent, "Game"], Iterable[GameEvent] | None]
Condition = Callable[[GameEvent], bool]


@dataclass(frozen=True)
class EventListener:
    id: ListenerId
    event_type: str
    reaction: Reaction
    condition: Condition | None = None
    priority: int = 0
    description: str = ""

    def matches(self, event: GameEvent) -> bool:
        """Type match plus optional condition."""
        if event.type != self.event_type:
            return False
        return self.condition is None or bool(self.condition(event))


def create_event_listener(
    event_type: str,
    reaction: Reaction,
    condition: Condition | None = None,
    priority: int = 0,
    listener_id: ListenerId | None = None,
    description: str = "",
) -> EventListener:
    """
    Create a listener with a fresh id unless one is given.

    Raises:
        EntityValidationError: empty event type, missing reaction, bad priority
    """
    if not isinstance(event_type, str) or not event_type.strip():
        raise EntityValidationError("Event type cannot be empty")
    if reaction is None or not callable(reaction):
        raise EntityValidationError("Reaction must be callable")
    if condition is not None and not callable(condition):
        raise EntityValidationError("Condition must be callable")
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise EntityValidationError("Priority must be an integer")
    if listener_id is not None and not is_valid_id(listener_id, ListenerId):
        raise EntityValidationError("Invalid listener ID")

    return EventListener(
        id=listener_id or create_listener_id(),
        event_type=event_type,
        reaction=reaction,
        condition=condition,
        priority=priority,
        description=description,
    )


def validate_event_listener(listener: Any) -> bool:
    """Exception-free shape check for a listener of unknown origin."""
    if not isinstance(listener, EventListener):
        return False
    if not is_valid_id(listener.id, ListenerId):
        return False
    if not isinstance(listener.event_type, str) or not listener.event_type.strip():
        return False
    if not callable(listener.reaction):
        return False
    if listener.condition is not None and not callable(listener.condition):
        return False
    return isinstance(listener.priority, int) and not isinstance(listener.priority, bool)


def subscribe_to_event(manager: EventManager, listener: EventListener) -> EventManager:
    """Return manager with listener registered, keeping priority order."""
    if not validate_event_listener(listener):
        raise EntityValidationError("Invalid event listener")
    if any(l.id == listener.id for l in manager.listeners):
        raise EntityValidationError("Listener with this ID already exists")

    # sorted() is stable, so equal priorities keep registration order
    listeners = sorted(manager.listeners + (listener,), key=lambda l: l.priority)
    return replace(manager, listeners=tuple(listeners))


def unsubscribe_from_event(manager: EventManager, listener_id: ListenerId) -> EventManager:
    if not any(l.id == listener_id for l in manager.listeners):
        raise EntityValidationError("Listener not found")
    return replace(manager, listeners=tuple(l for l in manager.listeners if l.id != listener_id))


def clear_all_listeners(manager: EventManager) -> EventManager:
    return replace(manager, listeners=())
