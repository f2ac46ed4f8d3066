"""
Events - Reactive event processing.

Actions raise events; listeners react to events by producing more events.
The manager drains the queue with priority ordering and a recursion bound.
"""

from .event import GameEvent, EventTypes, create_game_event
from .listeners import (
    EventListener,
    create_event_listener,
    subscribe_to_event,
    unsubscribe_from_event,
    clear_all_listeners,
    validate_event_listener,
)
from .manager import (
    EventManager,
    EventProcessingResult,
    create_event_manager,
    publish_event,
    process_events,
    clear_event_queue,
)
from .integration import (
    add_event_listener_to_game,
    remove_event_listener_from_game,
    get_active_listeners,
    initialize_game_with_event_manager,
    publish_game_event,
    process_game_events,
)

__all__ = [
    "GameEvent",
    "EventTypes",
    "create_game_event",
    "EventListener",
    "create_event_listener",
    "subscribe_to_event",
    "unsubscribe_from_event",
    "clear_all_listeners",
    "validate_event_listener",
    "EventManager",
    "EventProcessingResult",
    "create_event_manager",
    "publish_event",
    "process_events",
    "clear_event_queue",
    "add_event_listener_to_game",
    "remove_event_listener_from_game",
    "get_active_listeners",
    "initialize_game_with_event_manager",
    "publish_game_event",
    "process_game_events",
]
