"""
Rule Definitions - Declarative trigger/action rules.

A rule says: when an event of event_type arrives and condition holds,
request these actions in order. Rules are plain data so they can be
persisted; the compiler turns them into event listeners.

Rules are authored either directly or as a node graph (trigger nodes
connected by edges to action nodes), using the step names below:

    drawCards     playerId, count
    playCard      cardId, playerId, targets
    moveCard      cardId, fromZone, toZone, position
    modifyStat    target, stat, value
    tapCard       cardId
    untapCard     cardId
    discardCard   cardId, playerId
    shuffleZone   zoneId
    addCounter    target, counterType, count
    removeCounter target, counterType, count
    setTurnPhase  phaseName
    viewZone      playerId, zoneId, count
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..actions.action import ActionType

STEP_ACTIONS: dict[str, ActionType] = {
    "drawCards": ActionType.DRAW_CARDS,
    "playCard": ActionType.PLAY_CARD,
    "moveCard": ActionType.MOVE_CARD,
    "modifyStat": ActionType.MODIFY_STAT,
    "tapCard": ActionType.TAP_CARD,
    "untapCard": ActionType.UNTAP_CARD,
    "discardCard": ActionType.DISCARD_CARD,
    "shuffleZone": ActionType.SHUFFLE_ZONE,
    "addCounter": ActionType.ADD_COUNTER,
    "removeCounter": ActionType.REMOVE_COUNTER,
    "setTurnPhase": ActionType.SET_TURN_PHASE,
    "viewZone": ActionType.VIEW_ZONE,
}

REQUIRED_PARAMETERS: dict[ActionType, tuple[str, ...]] = {
    ActionType.DRAW_CARDS: ("playerId",),
    ActionType.PLAY_CARD: ("cardId", "playerId"),
    ActionType.MOVE_CARD: ("cardId", "fromZone", "toZone"),
    ActionType.MODIFY_STAT: ("target", "stat", "value"),
    ActionType.TAP_CARD: ("cardId",),
    ActionType.UNTAP_CARD: ("cardId",),
    ActionType.DISCARD_CARD: ("cardId", "playerId"),
    ActionType.SHUFFLE_ZONE: ("zoneId",),
    ActionType.ADD_COUNTER: ("target", "counterType"),
    ActionType.REMOVE_COUNTER: ("target", "counterType"),
    ActionType.SET_TURN_PHASE: ("phaseName",),
    ActionType.VIEW_ZONE: ("playerId", "zoneId"),
}

TRIGGER_NODE = "trigger"
ACTION_NODE = "action"
DEFAULT_RULE_PRIORITY = 1


def resolve_action_type(name: str | ActionType) -> ActionType | None:
    """Map a step name ("drawCards" or "DRAW_CARDS") to its ActionType."""
    if isinstance(name, ActionType):
        return name
    if not isinstance(name, str):
        return None
    if name in STEP_ACTIONS:
        return STEP_ACTIONS[name]
    try:
        return ActionType(name)
    except ValueError:
        return None


@dataclass(frozen=True)
class RuleStep:
    """One requested action. Parameters may use $event/$game placeholders."""
    action_type: str
    parameters: dict[str, Any] = field(default_factory=dict)
    step_id: str = ""
    label: str = ""


@dataclass(frozen=True)
class RuleDefinition:
    """
    A persisted rule.

    condition is an expression over the triggering event (see
    rules.expression); None means always.
    """
    rule_id: str
    name: str
    event_type: str
    actions: tuple[RuleStep, ...] = ()
    condition: str | None = None
    priority: int = DEFAULT_RULE_PRIORITY
    description: str = ""
    is_active: bool = True


# =============================================================================
# Node graphs
# =============================================================================

def _node_data(node: Mapping[str, Any]) -> Mapping[str, Any]:
    return node.get("data") or {}


def step_from_node(node: Mapping[str, Any]) -> RuleStep:
    data = _node_data(node)
    return RuleStep(
        action_type=data.get("actionType", ""),
        parameters=dict(data.get("parameters") or {}),
        step_id=str(node.get("id", "")),
        label=data.get("label", ""),
    )


def extract_rules(
    nodes: Iterable[Mapping[str, Any]],
    edges: Iterable[Mapping[str, Any]],
) -> list[RuleDefinition]:
    """
    Build one rule per trigger node that has at least one action node
    connected to it. Actions keep node order, not edge order.
    """
    nodes = list(nodes)
    edges = list(edges)
    rules = []

    for trigger in (n for n in nodes if n.get("type") == TRIGGER_NODE):
        targets = {e.get("target") for e in edges if e.get("source") == trigger.get("id")}
        action_nodes = [n for n in nodes if n.get("id") in targets and n.get("type") == ACTION_NODE]
        if not action_nodes:
            continue

        data = _node_data(trigger)
        label = data.get("label") or "Unnamed Rule"
        steps = tuple(step_from_node(n) for n in action_nodes)
        rules.append(
            RuleDefinition(
                rule_id=f"rule-{trigger.get('id')}",
                name=label,
                event_type=data.get("eventType", ""),
                actions=steps,
                condition=data.get("condition") or None,
                priority=data.get("priority") or DEFAULT_RULE_PRIORITY,
                description=f"{label} -> {', '.join(s.label for s in steps)}",
            )
        )

    return rules

