"""
Reducer - Applies actions to a Game.

The reducer is the single point of state transition.
All state changes must go through execute_action() or apply_action().

Design principles:
- Pure function: (game, action) -> new game
- Always re-validates, even after a successful validate_action()
- Never partially applies: a failing action leaves no trace
- Returns the events the transition raised so callers can publish them
"""

from __future__ import annotations
from typing import Callable
import logging
import random

from ..errors import ActionError, CardsmithError
from ..primitives.game import Game
from .action import Action, ActionPayload, ActionResult, ActionType, Transition
from . import movement, stats

logger = logging.getLogger(__name__)

Check = Callable[[Game, ActionPayload], "str | None"]
Apply = Callable[..., Transition]

_HANDLERS: dict[ActionType, tuple[Check, Apply]] = {
    ActionType.MOVE_CARD: (movement._check_move_card, movement._apply_move_card),
    ActionType.DRAW_CARDS: (movement._check_draw_cards, movement._apply_draw_cards),
    ActionType.PLAY_CARD: (movement._check_play_card, movement._apply_play_card),
    ActionType.DISCARD_CARD: (movement._check_discard_card, movement._apply_discard_card),
    ActionType.SHUFFLE_ZONE: (movement._check_shuffle_zone, movement._apply_shuffle_zone),
    ActionType.VIEW_ZONE: (movement._check_view_zone, movement._apply_view_zone),
    ActionType.MODIFY_STAT: (stats._check_modify_stat, stats._apply_modify_stat),
    ActionType.TAP_CARD: (stats._check_tap, stats._apply_tap_card),
    ActionType.UNTAP_CARD: (stats._check_tap, stats._apply_untap_card),
    ActionType.ADD_COUNTER: (stats._check_counter_change, stats._apply_add_counter),
    ActionType.REMOVE_COUNTER: (stats._check_remove_counter, stats._apply_remove_counter),
    ActionType.SET_TURN_PHASE: (stats._check_set_turn_phase, stats._apply_set_turn_phase),
}


def _get_handler(action_type: ActionType) -> tuple[Check, Apply] | None:
    """Get the (check, apply) pair for an action type."""
    return _HANDLERS.get(action_type)


def _validate_action(game: Game, action: Action) -> str | None:
    """
    Validate that an action is legal against the given game.

    Returns error message if invalid, None if valid.
    """
    if not isinstance(game, Game):
        return "Invalid game"
    if not isinstance(action, Action):
        return "Invalid action"

    handler = _get_handler(action.action_type)
    if handler is None:
        return f"Unknown action type: {action.action_type}"

    check, _ = handler
    return check(game, action.payload)


def apply_action(game: Game, action: Action, rng: random.Random | None = None) -> ActionResult:
    """
    Apply an action to the game.

    Never raises for a rejected action: returns ActionResult with the new
    game or the error message. rng only matters for shuffles.
    """
    error = _validate_action(game, action)
    if error:
        logger.debug("Rejected %s: %s", _type_name(action), error)
        return ActionResult.failure(error)

    _, apply = _get_handler(action.action_type)
    try:
        transition = apply(game, action, rng)
    except CardsmithError as e:
        # A primitive refused a change the check let through.
        logger.debug("Failed %s: %s", _type_name(action), e)
        return ActionResult.failure(str(e))

    logger.debug("Applied %s: %s", _type_name(action), "; ".join(transition.changes))
    return ActionResult.success_with_game(transition.game, transition.events, transition.changes)


def execute_action(game: Game, action: Action, rng: random.Random | None = None) -> Game:
    """
    Apply an action and return the next game.

    Raises:
        ActionError: the action's preconditions do not hold
    """
    result = apply_action(game, action, rng)
    if not result.success:
        raise ActionError(result.error, action_type=_type_name(action))
    return result.game


def validate_action(game: Game, action: Action) -> bool:
    """Dry, exception-free check of whether action would succeed."""
    try:
        return _validate_action(game, action) is None
    except Exception:
        logger.debug("Validation of %s raised", _type_name(action), exc_info=True)
        return False


def can_execute_action(game: Game, action: Action) -> bool:
    """Whether a caller (e.g. a UI) should offer this action at all."""
    return validate_action(game, action)


def explain_action(game: Game, action: Action) -> str | None:
    """Why action would be rejected, or None if it would succeed."""
    return _validate_action(game, action)


def _type_name(action) -> str | None:
    action_type = getattr(action, "action_type", None)
    return action_type.value if isinstance(action_type, ActionType) else None
