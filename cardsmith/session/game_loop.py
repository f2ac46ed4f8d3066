"""
Game Loop - Drives actions through the event system until quiet.

The loop:
1. Caller submits an action
2. The action is applied; its events are published
3. Listeners react, possibly requesting more actions (*_REQUESTED events)
4. Requested actions are applied and their events published in turn
5. Repeat until no requests remain or the round bound is reached

The core engine never schedules anything on its own; this loop is the
one place where listener requests turn into state changes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..actions import Action, apply_action, can_execute_action, explain_action
from ..config import EngineConfig
from ..errors import EventQueueFullError
from ..events.event import EventTypes, GameEvent, create_game_event
from ..events.integration import (
    add_event_listener_to_game,
    get_active_listeners,
    initialize_game_with_event_manager,
    process_game_events,
    publish_game_event,
    remove_event_listener_from_game,
    with_event_manager,
)
from ..events.listeners import EventListener
from ..primitives.game import Game, increment_turn_number, next_player
from ..primitives.ids import ListenerId
from ..rules.compiler import CompiledRule, RuleCompiler
from ..rules.definition import RuleDefinition

logger = logging.getLogger(__name__)

ROUND_LIMIT = "Maximum action rounds reached"


@dataclass
class TurnResult:
    """
    Result of dispatching an action (or publishing an event).

    success is whether the submitted action itself applied; failures of
    listener-requested actions are reported in errors without undoing it.
    """
    success: bool
    game: Game

    applied_actions: list[Action] = field(default_factory=list)
    events: list[GameEvent] = field(default_factory=list)
    changes: list[str] = field(default_factory=list)
    rounds: int = 0

    errors: list[str] = field(default_factory=list)


def dispatch_action(
    game: Game,
    action: Action,
    max_rounds: int = 10,
    rng: random.Random | None = None,
) -> TurnResult:
    """
    Apply action, then run the reactions it sets off.

    Never raises for rejected actions; see TurnResult.errors.
    """
    result = apply_action(game, action, rng)
    if not result.success:
        return TurnResult(success=False, game=game, errors=[result.error])

    turn = TurnResult(success=True, game=result.game, applied_actions=[action], changes=list(result.changes))
    _cascade(turn, result.events, max_rounds, rng)
    return turn


def dispatch_events(
    game: Game,
    events: list[GameEvent],
    max_rounds: int = 10,
    rng: random.Random | None = None,
) -> TurnResult:
    """Publish events directly and run the reactions they set off."""
    turn = TurnResult(success=True, game=game)
    _cascade(turn, events, max_rounds, rng)
    return turn


def _cascade(turn: TurnResult, events: list[GameEvent], max_rounds: int, rng: random.Random | None) -> None:
    pending = list(events)
    while pending:
        game = turn.game
        for event in pending:
            try:
                game = publish_game_event(game, event)
            except EventQueueFullError as e:
                turn.errors.append(str(e))
                break

        processing = process_game_events(game)
        turn.game = processing.game
        turn.events.extend(processing.processed_events)
        turn.errors.extend(processing.errors)

        requests = []
        for event in processing.generated_events:
            if event.is_action_request:
                requests.append(event.payload["action"])
            elif event.type == EventTypes.ACTION_ERROR:
                turn.errors.append(f"Rule {event.payload.get('rule_id')}: {event.payload.get('error')}")

        pending = []
        if not requests:
            break
        if turn.rounds >= max_rounds:
            logger.warning("%s (%d requests dropped)", ROUND_LIMIT, len(requests))
            turn.errors.append(ROUND_LIMIT)
            break
        turn.rounds += 1

        for requested in requests:
            outcome = apply_action(turn.game, requested, rng)
            if not outcome.success:
                turn.errors.append(f"{requested.action_type.value}: {outcome.error}")
                continue
            turn.game = outcome.game
            turn.applied_actions.append(requested)
            turn.changes.extend(outcome.changes)
            pending.extend(outcome.events)


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(game)
        loop.add_rule(rule)

        if loop.can_submit(action):
            result = loop.submit(action)
            show(result.changes)

        loop.next_turn()
    """

    def __init__(
        self,
        game: Game,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
        compiler: RuleCompiler | None = None,
    ):
        self.config = config or EngineConfig()
        self.rng = rng
        self.compiler = compiler or RuleCompiler()
        game = initialize_game_with_event_manager(game)
        self.game = with_event_manager(
            game,
            max_queue_size=self.config.max_queue_size,
            enable_logging=self.config.enable_event_logging,
        )
        self.history: list[TurnResult] = []

    def submit(self, action: Action) -> TurnResult:
        """Dispatch an action against the current game."""
        result = dispatch_action(self.game, action, self.config.max_action_rounds, self.rng)
        if result.success:
            self.game = result.game
            logger.debug("Submitted %s: %s", action.action_type.value, "; ".join(result.changes))
        self.history.append(result)
        return result

    def can_submit(self, action: Action) -> bool:
        return can_execute_action(self.game, action)

    def explain(self, action: Action) -> str | None:
        return explain_action(self.game, action)

    def publish(self, event: GameEvent) -> TurnResult:
        """Publish an event from outside the action library."""
        result = dispatch_events(self.game, [event], self.config.max_action_rounds, self.rng)
        self.game = result.game
        self.history.append(result)
        return result

    def next_turn(self) -> TurnResult:
        """Pass the turn to the next player and announce it with TURN_START."""
        game = increment_turn_number(next_player(self.game))
        self.game = game
        event = create_game_event(
            EventTypes.TURN_START,
            {"player_id": game.current_player, "turn_number": game.turn_number},
            triggered_by=game.current_player,
        )
        return self.publish(event)

    # Listeners and rules

    def add_listener(self, listener: EventListener) -> None:
        self.game = add_event_listener_to_game(self.game, listener)

    def remove_listener(self, listener_id: ListenerId) -> None:
        self.game = remove_event_listener_from_game(self.game, listener_id)

    def add_rule(self, rule: RuleDefinition) -> CompiledRule:
        compiled = self.compiler.compile_rule(rule)
        self.add_listener(compiled.listener)
        return compiled

    def listeners(self, event_type: str | None = None) -> tuple[EventListener, ...]:
        return get_active_listeners(self.game, event_type)
