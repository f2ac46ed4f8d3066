"""
Event Manager - Priority-ordered, bounded, cascading event dispatch.

States:
    idle        not processing; publish_event enqueues
    processing  draining a queue; process_events refuses re-entry

process_events drains the queue in batches. Each batch is dispatched to
matching listeners in priority order; the events they return form the
next batch. Dispatch stops after MAX_RECURSION_DEPTH batches so a listener
that keeps re-publishing its own event type cannot loop forever.

Listener failures are isolated: they are recorded in the result's error
list and processing continues with the next listener.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING
import logging

from ..config import DEFAULT_MAX_QUEUE_SIZE, MAX_RECURSION_DEPTH
from ..errors import EntityValidationError, EventQueueFullError, ListenerError
from .event import GameEvent
from .listeners import EventListener

if TYPE_CHECKING:
    from ..primitives.game import Game

logger = logging.getLogger(__name__)

ALREADY_PROCESSING = "Event processing already in progress"
RECURSION_LIMIT = "Maximum event recursion depth reached"


@dataclass(frozen=True)
class EventManager:
    """
    Listener registry plus pending event queue.

    listeners is kept sorted by priority (stable).
    """
    listeners: tuple[EventListener, ...] = ()
    event_queue: tuple[GameEvent, ...] = ()
    is_processing: bool = False
    max_queue_size: int | None = DEFAULT_MAX_QUEUE_SIZE
    enable_logging: bool = False


@dataclass
class EventProcessingResult:
    """
    Outcome of one processing pass.

    game is returned unmodified: listeners produce events, not state.
    """
    manager: EventManager
    game: Game
    processed_events: list[GameEvent] = field(default_factory=list)
    generated_events: list[GameEvent] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def create_event_manager(
    max_queue_size: int | None = DEFAULT_MAX_QUEUE_SIZE,
    enable_logging: bool = False,
) -> EventManager:
    if max_queue_size is not None:
        if isinstance(max_queue_size, bool) or not isinstance(max_queue_size, int) or max_queue_size < 1:
            raise EntityValidationError("Invalid max queue size")
    return EventManager(max_queue_size=max_queue_size, enable_logging=bool(enable_logging))


def publish_event(manager: EventManager, event: GameEvent) -> EventManager:
    """
    Return manager with event appended to its queue.

    Raises:
        EventQueueFullError: the queue already holds max_queue_size events
    """
    if manager.max_queue_size is not None and len(manager.event_queue) >= manager.max_queue_size:
        logger.warning("Event queue is full, dropping %s", event.type)
        raise EventQueueFullError("Event queue is full")
    return replace(manager, event_queue=manager.event_queue + (event,))


def clear_event_queue(manager: EventManager) -> EventManager:
    return replace(manager, event_queue=())


def matching_listeners(manager: EventManager, event: GameEvent) -> list[EventListener]:
    """Listeners for event.type in priority order (ties by registration)."""
    candidates = [l for l in manager.listeners if l.event_type == event.type]
    return sorted(candidates, key=lambda l: l.priority)


def process_events(manager: EventManager, game: Game) -> EventProcessingResult:
    """
    Drain the manager's queue, dispatching events to listeners.

    Returns the final (idle, empty-queue) manager, the unmodified game,
    every processed and generated event, and the collected errors.
    """
    if manager.is_processing:
        return EventProcessingResult(manager=manager, game=game, errors=[ALREADY_PROCESSING])

    processing = replace(manager, is_processing=True, event_queue=())
    result = EventProcessingResult(manager=processing, game=game)

    # Reactions see the game with a busy manager, so a nested
    # process_events on it is refused instead of re-entering.
    view = game._copy_with(event_manager=processing)

    batch = list(manager.event_queue)
    depth = 0
    while batch:
        if depth >= MAX_RECURSION_DEPTH:
            logger.warning("%s (%d events dropped)", RECURSION_LIMIT, len(batch))
            result.errors.append(RECURSION_LIMIT)
            break
        depth += 1

        generated: list[GameEvent] = []
        for event in batch:
            result.processed_events.append(event)
            if manager.enable_logging:
                logger.debug("Dispatching %s (depth %d)", event.type, depth)

            for listener in matching_listeners(manager, event):
                try:
                    if listener.condition is not None and not listener.condition(event):
                        continue
                    produced = listener.reaction(event, view)
                    new_events = _collect(produced)
                except Exception as e:
                    error = ListenerError(str(listener.id), e)
                    logger.warning("%s", error)
                    result.errors.append(f"Callback error: {e}")
                    continue

                generated.extend(new_events)
                result.generated_events.extend(new_events)

        batch = generated

    result.manager = replace(processing, is_processing=False)
    return result


def _collect(produced) -> list[GameEvent]:
    """Normalise a reaction's return value to a list of events."""
    if produced is None:
        return []
    if isinstance(produced, GameEvent):
        return [produced]
    events = list(produced)
    for item in events:
        if not isinstance(item, GameEvent):
            raise TypeError(f"Reaction returned non-event value: {item!r}")
    return events
