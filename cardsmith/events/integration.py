"""
Game Integration - Bind the event system to a Game.

These helpers operate on the event manager embedded in a Game and return
new Games. Callers outside the engine should use get_active_listeners
instead of reaching into the manager.
"""

from __future__ import annotations
from dataclasses import replace
from typing import TYPE_CHECKING

from ..primitives.ids import ListenerId
from .event import GameEvent
from .listeners import EventListener, subscribe_to_event, unsubscribe_from_event
from .manager import EventManager, EventProcessingResult, create_event_manager, process_events, publish_event

if TYPE_CHECKING:
    from ..primitives.game import Game


def add_event_listener_to_game(game: Game, listener: EventListener) -> Game:
    return game._copy_with(event_manager=subscribe_to_event(game.event_manager, listener))


def remove_event_listener_from_game(game: Game, listener_id: ListenerId) -> Game:
    return game._copy_with(event_manager=unsubscribe_from_event(game.event_manager, listener_id))


def get_active_listeners(game: Game, event_type: str | None = None) -> tuple[EventListener, ...]:
    """Listeners registered on the game, optionally filtered by event type."""
    listeners = game.event_manager.listeners
    if event_type is None:
        return tuple(listeners)
    return tuple(l for l in listeners if l.event_type == event_type)


def initialize_game_with_event_manager(game: Game, manager: EventManager | None = None) -> Game:
    """Ensure the game carries a manager; an existing one is kept."""
    if isinstance(game.event_manager, EventManager):
        return game
    return game._copy_with(event_manager=manager or create_event_manager())


def publish_game_event(game: Game, event: GameEvent) -> Game:
    return game._copy_with(event_manager=publish_event(game.event_manager, event))


def process_game_events(game: Game) -> EventProcessingResult:
    """
    Process the game's own queue.

    The result's game carries the final manager, so listener registrations
    and the now-empty queue stay with the game.
    """
    result = process_events(game.event_manager, game)
    if result.manager is not game.event_manager:
        result.game = game._copy_with(event_manager=result.manager)
    return result


def with_event_manager(game: Game, **changes) -> Game:
    """Return game with manager settings (max_queue_size, enable_logging) changed."""
    return game._copy_with(event_manager=replace(game.event_manager, **changes))
