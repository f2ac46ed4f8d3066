"""
Rule Compiler - Turns rule definitions into event listeners.

The compiler:
1. Accepts rule definitions (or a trigger/action node graph)
2. Compiles each condition string into a listener condition
3. Builds a reaction that requests each step's action as an event
4. Returns CompiledRules ready to subscribe

Reactions never touch the game. Each step becomes a
``<ACTION_TYPE>_REQUESTED`` event whose payload carries the built Action
under "action"; the game loop executes it. A step that cannot be built
becomes an ACTION_ERROR event instead.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, TYPE_CHECKING
import logging

from ..actions.action import Action, ActionType
from ..errors import ActionError
from ..events.event import EventTypes, GameEvent, create_game_event
from ..events.integration import add_event_listener_to_game
from ..events.listeners import EventListener, create_event_listener
from ..primitives.ids import CardId, Identifier, ListenerId, PlayerId, ZoneId
from .definition import REQUIRED_PARAMETERS, RuleDefinition, RuleStep, extract_rules, resolve_action_type
from .expression import ExpressionContext, ExpressionEvaluator, substitute_parameters

if TYPE_CHECKING:
    from ..primitives.game import Game

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledRule:
    id: str
    listener: EventListener
    rule: RuleDefinition


class RuleCompiler:
    """
    Compiles rule definitions into listeners.

    Usage:
        compiler = RuleCompiler()
        for compiled in compiler.compile_all_rules(nodes, edges):
            game = add_event_listener_to_game(game, compiled.listener)
    """

    def __init__(self, evaluator: ExpressionEvaluator | None = None):
        self.evaluator = evaluator or ExpressionEvaluator()

    @staticmethod
    def extract_rules(
        nodes: Iterable[Mapping[str, Any]], edges: Iterable[Mapping[str, Any]]
    ) -> list[RuleDefinition]:
        return extract_rules(nodes, edges)

    def compile_rule(self, rule: RuleDefinition) -> CompiledRule:
        """
        Compile one rule into a listener whose id is the rule id.

        Raises:
            EntityValidationError: the rule has no event type or a bad priority
        """
        condition = None
        if rule.condition:
            expression = rule.condition

            def condition(event: GameEvent) -> bool:
                return self.evaluator.evaluate_condition(expression, ExpressionContext(event=event))

        def reaction(event: GameEvent, game: Game) -> list[GameEvent]:
            return [self._request(rule, step, event, game) for step in rule.actions]

        listener = create_event_listener(
            event_type=rule.event_type,
            reaction=reaction,
            condition=condition,
            priority=rule.priority,
            listener_id=ListenerId(rule.rule_id),
            description=rule.description or rule.name,
        )
        return CompiledRule(id=rule.rule_id, listener=listener, rule=rule)

    def compile_rules(self, rules: Iterable[RuleDefinition]) -> list[CompiledRule]:
        """Compile the active rules, in order."""
        return [self.compile_rule(rule) for rule in rules if rule.is_active]

    def compile_all_rules(
        self, nodes: Iterable[Mapping[str, Any]], edges: Iterable[Mapping[str, Any]]
    ) -> list[CompiledRule]:
        """Compile every rule found in a node graph."""
        return self.compile_rules(self.extract_rules(nodes, edges))

    def _request(self, rule: RuleDefinition, step: RuleStep, event: GameEvent, game: Game) -> GameEvent:
        try:
            action = build_action(step, event, game)
        except (ActionError, ValueError) as e:
            logger.warning("Rule %s step %s failed: %s", rule.rule_id, step.step_id or step.action_type, e)
            return create_game_event(
                EventTypes.ACTION_ERROR,
                {
                    "rule_id": rule.rule_id,
                    "step_id": step.step_id,
                    "action_type": step.action_type,
                    "error": str(e),
                },
            )

        return create_game_event(
            action.action_type.value + EventTypes.REQUESTED_SUFFIX,
            {"action": action, "rule_id": rule.rule_id, "step_id": step.step_id},
            triggered_by=event.triggered_by,
        )


def register_rules(game: Game, compiled: Iterable[CompiledRule]) -> Game:
    """Subscribe compiled rules on the game's event manager."""
    for rule in compiled:
        game = add_event_listener_to_game(game, rule.listener)
    return game


# =============================================================================
# Step -> Action
# =============================================================================

def build_action(step: RuleStep, event: GameEvent, game: Game | None = None) -> Action:
    """
    Build the Action a step requests for this event.

    Raises:
        ActionError: unknown action type or a required parameter is missing
    """
    action_type = resolve_action_type(step.action_type)
    if action_type is None:
        raise ActionError(f"Unknown action type: {step.action_type}")

    params = substitute_parameters(step.parameters, event, game)
    for name in REQUIRED_PARAMETERS[action_type]:
        if params.get(name) in (None, ""):
            raise ActionError(f"Missing parameter '{name}'", action_type=action_type.value)

    if action_type is ActionType.DRAW_CARDS:
        return Action.draw_cards(_as_id(params["playerId"], PlayerId), _as_int(params.get("count"), 1))
    if action_type is ActionType.PLAY_CARD:
        return Action.play_card(
            _as_id(params["cardId"], CardId),
            _as_id(params["playerId"], PlayerId),
            [_as_any_id(t, game) for t in _as_list(params.get("targets"))],
        )
    if action_type is ActionType.MOVE_CARD:
        position = params.get("position")
        return Action.move_card(
            _as_id(params["cardId"], CardId),
            _as_id(params["fromZone"], ZoneId),
            _as_id(params["toZone"], ZoneId),
            None if position in (None, "") else _as_int(position, None),
        )
    if action_type is ActionType.MODIFY_STAT:
        return Action.modify_stat(_as_target(params["target"], game), str(params["stat"]), _as_int(params["value"], 0))
    if action_type is ActionType.TAP_CARD:
        return Action.tap_card(_as_id(params["cardId"], CardId))
    if action_type is ActionType.UNTAP_CARD:
        return Action.untap_card(_as_id(params["cardId"], CardId))
    if action_type is ActionType.DISCARD_CARD:
        return Action.discard_card(_as_id(params["playerId"], PlayerId), _as_id(params["cardId"], CardId))
    if action_type is ActionType.SHUFFLE_ZONE:
        return Action.shuffle_zone(_as_id(params["zoneId"], ZoneId))
    if action_type is ActionType.ADD_COUNTER:
        return Action.add_counter(
            _as_target(params["target"], game), str(params["counterType"]), _as_int(params.get("count"), 1)
        )
    if action_type is ActionType.REMOVE_COUNTER:
        return Action.remove_counter(
            _as_target(params["target"], game), str(params["counterType"]), _as_int(params.get("count"), 1)
        )
    if action_type is ActionType.SET_TURN_PHASE:
        return Action.set_turn_phase(str(params["phaseName"]))
    if action_type is ActionType.VIEW_ZONE:
        return Action.view_zone(
            _as_id(params["playerId"], PlayerId),
            _as_id(params["zoneId"], ZoneId),
            _as_int(params.get("count"), 1),
        )
    raise ActionError(f"Unknown action type: {step.action_type}")


def _as_id(value: Any, kind: type[Identifier]) -> Identifier:
    if isinstance(value, kind):
        return value
    if isinstance(value, Identifier):
        return kind(value.value)
    return kind(str(value))


def _as_int(value: Any, default: int | None) -> int | None:
    """Lenient integer parse; unparseable or missing values give default."""
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> list[Any]:
    if value in (None, ""):
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return list(value)


def _as_target(value: Any, game: Game | None) -> CardId | PlayerId:
    """A stat/counter holder; bare strings name a player if one matches, else a card."""
    if isinstance(value, (CardId, PlayerId)):
        return value
    text = _plain_text(value)
    if game is not None and any(p.id.value == text for p in game.players):
        return PlayerId(text)
    return CardId(text)


def _as_any_id(value: Any, game: Game | None) -> Identifier:
    if isinstance(value, Identifier):
        return value
    text = str(value)
    if game is not None:
        if any(p.id.value == text for p in game.players):
            return PlayerId(text)
        if any(z.id.value == text for z in game.zones) or game.stack.id.value == text:
            return ZoneId(text)
    return CardId(text)


def _plain_text(value: Any) -> str:
    return value.value if isinstance(value, Identifier) else str(value)
