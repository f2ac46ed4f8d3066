"""
Tests for rules: expressions, definitions, validation and compilation.
"""

import pytest

from ..actions import Action, ActionType
from ..errors import ActionError, EntityValidationError, RuleValidationError
from ..events.event import EventTypes, create_game_event
from ..events.integration import get_active_listeners
from ..primitives.ids import CardId, ListenerId, PlayerId, ZoneId
from ..rules import (
    ExpressionContext,
    ExpressionEvaluator,
    RuleCompiler,
    RuleDefinition,
    RuleStep,
    build_action,
    extract_rules,
    register_rules,
    resolve_action_type,
    substitute_parameters,
    validate_rule,
    validate_rules,
)

P1, P2 = PlayerId("p1"), PlayerId("p2")


@pytest.fixture
def evaluator():
    return ExpressionEvaluator()


@pytest.fixture
def played():
    """A CARD_PLAYED event as the action library raises it."""
    return create_game_event(
        EventTypes.CARD_PLAYED,
        {
            "card_id": CardId("h1"),
            "player_id": P1,
            "card_name": "Fire Drake",
            "card_type": "Creature",
            "mana_cost": 2,
            "targets": [],
            "tags": ["fire", "dragon"],
        },
        triggered_by=P1,
    )


@pytest.fixture
def graph():
    """One connected trigger, one lonely trigger and a stray action."""
    nodes = [
        {"id": "t1", "type": "trigger",
         "data": {"label": "When a creature is played", "eventType": "CARD_PLAYED",
                  "condition": "payload.card_type == 'Creature'", "priority": 2}},
        {"id": "a1", "type": "action",
         "data": {"label": "Draw", "actionType": "drawCards",
                  "parameters": {"playerId": "$event.payload.playerId", "count": 1}}},
        {"id": "a2", "type": "action",
         "data": {"label": "Ping", "actionType": "modifyStat",
                  "parameters": {"target": "p2", "stat": "life", "value": -1}}},
        {"id": "t2", "type": "trigger", "data": {"label": "Nothing", "eventType": "CARD_TAPPED"}},
        {"id": "a3", "type": "action", "data": {"label": "Stray", "actionType": "tapCard"}},
    ]
    edges = [
        {"id": "e2", "source": "t1", "target": "a2"},
        {"id": "e1", "source": "t1", "target": "a1"},
    ]
    return nodes, edges


class TestExpressionEvaluator:
    """Tests for the condition language."""

    def test_literals(self, evaluator):
        """Numbers, strings, booleans and null."""
        ctx = ExpressionContext()
        assert evaluator.evaluate("3", ctx) == 3
        assert evaluator.evaluate("2.5", ctx) == 2.5
        assert evaluator.evaluate("'red'", ctx) == "red"
        assert evaluator.evaluate("true", ctx) is True
        assert evaluator.evaluate("null", ctx) is None
        assert evaluator.evaluate("", ctx) is None

    def test_arithmetic(self, evaluator):
        """Addition and subtraction are left-associative."""
        ctx = ExpressionContext()
        assert evaluator.evaluate("1 + 2", ctx) == 3
        assert evaluator.evaluate("5 - 2 - 1", ctx) == 2
        assert evaluator.evaluate("-1 + 3", ctx) == 2
        assert evaluator.evaluate("'a' + 'b'", ctx) == "ab"
        assert evaluator.evaluate("(1 + 2) == 3", ctx) is True

    def test_payload_paths(self, evaluator, played):
        """Payload entries are reachable from event and payload roots."""
        ctx = ExpressionContext(event=played)
        assert evaluator.evaluate("payload.card_type == 'Creature'", ctx)
        assert evaluator.evaluate("event.payload.mana_cost >= 2", ctx)
        assert evaluator.evaluate("event.type == 'CARD_PLAYED'", ctx)
        assert evaluator.evaluate("payload.missing", ctx) is None

    def test_camel_case_fallback(self, evaluator, played):
        """camelCase names read snake_case payload keys."""
        ctx = ExpressionContext(event=played)
        assert evaluator.evaluate("event.payload.cardName", ctx) == "Fire Drake"
        assert evaluator.evaluate("event.triggeredBy == 'p1'", ctx)

    def test_identifiers_compare_by_value(self, evaluator, played):
        """Typed ids compare equal to their string value."""
        ctx = ExpressionContext(event=played)
        assert evaluator.evaluate("payload.player_id == 'p1'", ctx)
        assert evaluator.evaluate("payload.card_id !== 'h2'", ctx)

    def test_boolean_operators(self, evaluator, played):
        """and binds tighter than or; not and ! negate."""
        ctx = ExpressionContext(event=played)
        assert evaluator.evaluate("false and false or true", ctx) is True
        assert evaluator.evaluate("true && !false", ctx) is True
        assert evaluator.evaluate("not payload.targets", ctx) is True
        assert evaluator.evaluate("payload.mana_cost > 5 || payload.card_type == 'Creature'", ctx) is True

    def test_functions(self, evaluator, played):
        """count, has, max and min."""
        ctx = ExpressionContext(event=played)
        assert evaluator.evaluate("count(payload.tags)", ctx) == 2
        assert evaluator.evaluate("has(payload.tags, 'fire')", ctx) is True
        assert evaluator.evaluate("has(payload.tags, 'water')", ctx) is False
        assert evaluator.evaluate("max(1, payload.mana_cost, 0)", ctx) == 2
        assert evaluator.evaluate("min(4, 3)", ctx) == 3
        assert evaluator.evaluate("unknown(1)", ctx) is None

    def test_game_roots(self, evaluator, game):
        """game and current_player resolve when a game is supplied."""
        ctx = ExpressionContext(game=game)
        assert evaluator.evaluate("game.turn_number + 1", ctx) == 2
        assert evaluator.evaluate("current_player.resources.mana >= 3", ctx)
        assert evaluator.evaluate("count(game.players)", ctx) == 2

    def test_without_game(self, evaluator):
        """Game roots are None when no game is present."""
        ctx = ExpressionContext()
        assert evaluator.evaluate("game.phase", ctx) is None
        assert evaluator.evaluate("current_player.name", ctx) is None

    def test_variables(self, evaluator):
        """Extra variables resolve by name."""
        ctx = ExpressionContext(variables={"threshold": {"value": 4}})
        assert evaluator.evaluate("threshold.value > 3", ctx)

    def test_mismatched_types_compare_false(self, evaluator):
        """Ordering incomparable values is false, not an error."""
        assert evaluator.evaluate_condition("'a' < 3", ExpressionContext()) is False

    def test_private_attributes_hidden(self, evaluator, game):
        """Underscore attributes are not reachable."""
        assert evaluator.evaluate("game._copy_with", ExpressionContext(game=game)) is None


class TestSubstituteParameters:
    """Tests for $event and $game placeholders."""

    def test_whole_value_keeps_type(self, played):
        """A lone placeholder keeps the referenced value."""
        params = substitute_parameters({"playerId": "$event.payload.playerId", "count": 2}, played)
        assert params == {"playerId": P1, "count": 2}

    def test_embedded_placeholder(self, played):
        """Embedded placeholders are replaced by text."""
        params = substitute_parameters({"note": "played $event.payload.card_name"}, played)
        assert params["note"] == "played Fire Drake"

    def test_triggered_by_and_current_player(self, played, game):
        """Origin and current player placeholders."""
        params = substitute_parameters(
            {"a": "$event.triggered_by", "b": "$event.triggeredBy", "c": "$game.current_player"}, played, game
        )
        assert params == {"a": P1, "b": P1, "c": P1}

    def test_missing_values_are_empty(self, played):
        """Unknown payload keys and an absent game give empty strings."""
        params = substitute_parameters({"a": "$event.payload.nothing", "b": "$game.currentPlayer"}, played)
        assert params == {"a": "", "b": ""}


class TestRuleDefinitions:
    """Tests for rule data and graph extraction."""

    def test_resolve_action_type(self):
        """Step names accept camelCase or enum values."""
        assert resolve_action_type("drawCards") is ActionType.DRAW_CARDS
        assert resolve_action_type("SHUFFLE_ZONE") is ActionType.SHUFFLE_ZONE
        assert resolve_action_type(ActionType.TAP_CARD) is ActionType.TAP_CARD
        assert resolve_action_type("fly") is None
        assert resolve_action_type(None) is None

    def test_extract_rules(self, graph):
        """One rule per connected trigger, actions in node order."""
        rules = extract_rules(*graph)

        assert len(rules) == 1
        rule = rules[0]
        assert rule.rule_id == "rule-t1"
        assert rule.name == "When a creature is played"
        assert rule.event_type == "CARD_PLAYED"
        assert rule.condition == "payload.card_type == 'Creature'"
        assert rule.priority == 2
        assert [s.step_id for s in rule.actions] == ["a1", "a2"]
        assert rule.description == "When a creature is played -> Draw, Ping"

    def test_unnamed_trigger(self):
        """Triggers without a label get a default name."""
        nodes = [
            {"id": "t", "type": "trigger", "data": {"eventType": "X"}},
            {"id": "a", "type": "action", "data": {"actionType": "tapCard", "label": "Tap"}},
        ]
        (rule,) = extract_rules(nodes, [{"source": "t", "target": "a"}])
        assert rule.name == "Unnamed Rule"
        assert rule.priority == 1


class TestRuleValidation:
    """Tests for structural rule checks."""

    def test_valid_rule(self, graph):
        """Extracted rules validate."""
        result = validate_rules(extract_rules(*graph))
        assert result.valid
        assert result.errors == []

    def test_missing_fields(self):
        """Empty ids and event types are errors."""
        result = validate_rule(RuleDefinition(rule_id="", name="x", event_type=""))
        assert not result.valid
        assert "Rule has empty ID" in result.errors
        assert any("no event type" in e for e in result.errors)
        assert any("no actions" in w for w in result.warnings)

    def test_step_errors(self):
        """Unknown actions and missing parameters are reported."""
        rule = RuleDefinition(
            rule_id="r1",
            name="Broken",
            event_type="X",
            actions=(
                RuleStep("fly", step_id="s1"),
                RuleStep("moveCard", {"cardId": "c1", "fromZone": ""}, step_id="s2"),
            ),
        )
        result = validate_rule(rule)
        assert result.errors == [
            "Rule 'r1': Step 's1' has unknown action type 'fly'",
            "Rule 'r1': Step 's2' (moveCard) is missing parameter 'fromZone'",
            "Rule 'r1': Step 's2' (moveCard) is missing parameter 'toZone'",
        ]

    def test_bad_priority_and_condition(self):
        """Priorities are ints and conditions are strings."""
        rule = RuleDefinition(rule_id="r", name="r", event_type="X", priority="2", condition=5)
        result = validate_rule(rule)
        assert len(result.errors) == 2

    def test_duplicates_and_inactive(self):
        """Duplicate ids are errors; inactive rules are warnings."""
        step = (RuleStep("tapCard", {"cardId": "c1"}),)
        rules = [
            RuleDefinition(rule_id="r", name="a", event_type="X", actions=step),
            RuleDefinition(rule_id="r", name="b", event_type="X", actions=step, is_active=False),
        ]
        result = validate_rules(rules)
        assert result.errors == ["Duplicate rule ID 'r'"]
        assert result.warnings == ["Rule 'r' is inactive"]
        with pytest.raises(RuleValidationError) as info:
            result.raise_for_errors()
        assert info.value.errors == ["Duplicate rule ID 'r'"]


class TestBuildAction:
    """Tests for turning steps into actions."""

    def test_draw(self, played):
        """Placeholders and defaults fill the action."""
        step = RuleStep("drawCards", {"playerId": "$event.payload.playerId"})
        assert build_action(step, played) == Action.draw_cards(P1, 1)

    def test_modify_stat_target_kinds(self, played, game):
        """Bare targets name a player when one matches, else a card."""
        to_player = build_action(RuleStep("modifyStat", {"target": "p2", "stat": "life", "value": "-3"}), played, game)
        to_card = build_action(RuleStep("modifyStat", {"target": "h1", "stat": "power", "value": 1}), played, game)
        assert to_player == Action.modify_stat(P2, "life", -3)
        assert to_card == Action.modify_stat(CardId("h1"), "power", 1)

    def test_play_targets(self, played, game):
        """Comma-separated targets resolve to typed ids."""
        step = RuleStep("playCard", {"cardId": "h2", "playerId": "p1", "targets": "p2, h1, deck-p1"})
        action = build_action(step, played, game)
        assert action.payload.targets == (P2, CardId("h1"), ZoneId("deck-p1"))

    def test_move_and_phase(self, played):
        """Optional position and the phase name."""
        move = build_action(
            RuleStep("moveCard", {"cardId": "$event.payload.card_id", "fromZone": "play-p1",
                                  "toZone": "discard", "position": ""}),
            played,
        )
        assert move == Action.move_card(CardId("h1"), ZoneId("play-p1"), ZoneId("discard"))
        assert build_action(RuleStep("setTurnPhase", {"phaseName": "combat"}), played) == Action.set_turn_phase("combat")

    def test_counters_and_view(self, played, game):
        """Counter counts default to 1; view counts are optional."""
        add = build_action(RuleStep("addCounter", {"target": "$event.payload.card_id", "counterType": "+1/+1"}), played, game)
        assert add == Action.add_counter(CardId("h1"), "+1/+1", 1)
        view = build_action(RuleStep("viewZone", {"playerId": "p1", "zoneId": "deck-p1", "count": 2}), played)
        assert view == Action.view_zone(P1, ZoneId("deck-p1"), 2)

    def test_missing_parameter(self, played):
        """Empty substitutions count as missing."""
        step = RuleStep("drawCards", {"playerId": "$event.payload.nobody"})
        with pytest.raises(ActionError, match="Missing parameter 'playerId'"):
            build_action(step, played)

    def test_unknown_type(self, played):
        with pytest.raises(ActionError, match="Unknown action type"):
            build_action(RuleStep("fly"), played)


class TestRuleCompiler:
    """Tests for compiling rules into listeners."""

    @pytest.fixture
    def compiler(self):
        return RuleCompiler()

    def test_compile_graph(self, compiler, graph, played, game):
        """A compiled rule requests its steps in order."""
        (compiled,) = compiler.compile_all_rules(*graph)
        listener = compiled.listener

        assert compiled.id == "rule-t1"
        assert listener.id == ListenerId("rule-t1")
        assert listener.event_type == "CARD_PLAYED"
        assert listener.priority == 2
        assert listener.matches(played)

        requests = listener.reaction(played, game)
        assert [e.type for e in requests] == ["DRAW_CARDS_REQUESTED", "MODIFY_STAT_REQUESTED"]
        assert all(e.is_action_request for e in requests)
        assert requests[0].payload["action"] == Action.draw_cards(P1, 1)
        assert requests[0].payload["rule_id"] == "rule-t1"
        assert requests[0].payload["step_id"] == "a1"
        assert requests[0].triggered_by == P1
        assert requests[1].payload["action"] == Action.modify_stat(P2, "life", -1)

    def test_condition_sees_event_only(self, compiler, played):
        """Conditions filter on the triggering event."""
        rule = RuleDefinition(rule_id="r", name="r", event_type="CARD_PLAYED",
                              condition="payload.card_type == 'Instant'")
        listener = compiler.compile_rule(rule).listener
        assert not listener.matches(played)

        rule = RuleDefinition(rule_id="g", name="g", event_type="CARD_PLAYED", condition="game.turn_number == 1")
        assert not compiler.compile_rule(rule).listener.matches(played)

    def test_unbuildable_step_becomes_action_error(self, compiler, played, game):
        """A step that cannot be built raises ACTION_ERROR instead."""
        rule = RuleDefinition(
            rule_id="r", name="r", event_type="CARD_PLAYED",
            actions=(RuleStep("drawCards", {"playerId": "$event.payload.nobody"}, step_id="s1"),),
        )
        (event,) = compiler.compile_rule(rule).listener.reaction(played, game)
        assert event.type == EventTypes.ACTION_ERROR
        assert event.payload["rule_id"] == "r"
        assert event.payload["step_id"] == "s1"
        assert "Missing parameter" in event.payload["error"]

    def test_inactive_rules_skipped(self, compiler):
        """Only active rules compile."""
        rules = [
            RuleDefinition(rule_id="on", name="on", event_type="X"),
            RuleDefinition(rule_id="off", name="off", event_type="X", is_active=False),
        ]
        assert [c.id for c in compiler.compile_rules(rules)] == ["on"]

    def test_rule_without_event_type(self, compiler):
        """Rules must name an event type to compile."""
        with pytest.raises(EntityValidationError):
            compiler.compile_rule(RuleDefinition(rule_id="r", name="r", event_type=""))

    def test_register_rules(self, compiler, graph, game):
        """Registered rules appear among the game's listeners."""
        game = register_rules(game, compiler.compile_all_rules(*graph))
        assert [l.id for l in get_active_listeners(game, "CARD_PLAYED")] == [ListenerId("rule-t1")]
