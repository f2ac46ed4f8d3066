"""
Minimal Expression Evaluator for rule conditions and parameters.

Supports:
- Literals: integers, floats, quoted strings, true/false/null
- Property access: event.type, payload.card_name, game.turn_number
- Comparisons: ==, !=, <, >, <=, >= (=== and !== are accepted too)
- Boolean operators: and, or, not (&&, ||, ! are accepted too)
- Simple arithmetic: +, -
- Functions: count(), has(), max(), min()

Property names written in camelCase fall back to their snake_case form,
so ``event.payload.cardName`` reads the ``card_name`` payload entry.

Nothing is ever passed to eval(); unknown names resolve to None.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
import re

from ..primitives.ids import Identifier

if TYPE_CHECKING:
    from ..events.event import GameEvent
    from ..primitives.game import Game

_COMPARISONS = ("===", "!==", "==", "!=", ">=", "<=", ">", "<")
_OR = (" or ", "||")
_AND = (" and ", "&&")
_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")
_PLACEHOLDER = re.compile(r"\$(event\.payload\.\w+|event\.triggered_?[bB]y|game\.current_?[pP]layer)")


@dataclass
class ExpressionContext:
    """
    Context for evaluating expressions.

    Provides access to:
    - The triggering event (and its payload)
    - The game, when one is available
    - Extra variables
    """
    event: GameEvent | None = None
    game: Game | None = None
    variables: dict[str, Any] = field(default_factory=dict)

    def get_current_player(self):
        if self.game is None or self.game.current_player is None:
            return None
        from ..primitives.game import get_game_player

        return get_game_player(self.game, self.game.current_player)


class ExpressionEvaluator:
    """
    Evaluates rule expressions.

    Expressions can be:
    - Simple values: 3, "red", true
    - Property paths: payload.card_type, current_player.resources.mana
    - Comparisons: payload.mana_cost >= 3
    - Boolean: payload.card_type == "Instant" and not event.payload.targets
    - Arithmetic: game.turn_number + 1
    """

    def evaluate(self, expr: Any, context: ExpressionContext) -> Any:
        if isinstance(expr, (int, float, bool)) or expr is None:
            return expr
        if not isinstance(expr, str):
            return expr

        expr = expr.strip()
        if not expr:
            return None

        literal, found = _parse_literal(expr)
        if found:
            return literal

        if _wrapped_in_parens(expr):
            return self.evaluate(expr[1:-1], context)

        # Lowest precedence first
        split = _split(expr, _OR)
        if split:
            left, _, right = split
            return bool(self.evaluate(left, context)) or bool(self.evaluate(right, context))

        split = _split(expr, _AND)
        if split:
            left, _, right = split
            return bool(self.evaluate(left, context)) and bool(self.evaluate(right, context))

        lowered = expr.lower()
        if lowered.startswith("not "):
            return not self.evaluate(expr[4:], context)
        if expr.startswith("!") and not expr.startswith("!="):
            return not self.evaluate(expr[1:], context)

        split = _split(expr, _COMPARISONS)
        if split:
            left, op, right = split
            return self._compare(self.evaluate(left, context), self.evaluate(right, context), op)

        split = _split(expr, ("+", "-"), last=True)
        if split:
            left, op, right = split
            lhs = self.evaluate(left, context)
            rhs = self.evaluate(right, context)
            if _is_number(lhs) and _is_number(rhs):
                return lhs + rhs if op == "+" else lhs - rhs
            if op == "+" and isinstance(lhs, str) and isinstance(rhs, str):
                return lhs + rhs
            return None

        func_match = re.fullmatch(r"(\w+)\((.*)\)", expr)
        if func_match:
            return self._call_function(func_match.group(1), func_match.group(2), context)

        return self._resolve_property(expr, context)

    def evaluate_condition(self, expr: Any, context: ExpressionContext) -> bool:
        """Evaluate an expression as a boolean condition."""
        return bool(self.evaluate(expr, context))

    def _compare(self, left: Any, right: Any, op: str) -> bool:
        left, right = _plain(left), _plain(right)
        try:
            if op in ("==", "==="):
                return left == right
            if op in ("!=", "!=="):
                return left != right
            if op == "<":
                return left < right
            if op == ">":
                return left > right
            if op == "<=":
                return left <= right
            if op == ">=":
                return left >= right
        except TypeError:
            return False
        return False

    def _call_function(self, func_name: str, args_str: str, context: ExpressionContext) -> Any:
        args = _split_args(args_str)

        if func_name == "count":
            # count(collection) - cards in a zone, items in a list
            if args:
                value = self.evaluate(args[0], context)
                if hasattr(value, "cards"):
                    return len(value.cards)
                if hasattr(value, "__len__"):
                    return len(value)
            return 0

        if func_name == "has":
            # has(collection, value)
            if len(args) >= 2:
                collection = self.evaluate(args[0], context)
                value = _plain(self.evaluate(args[1], context))
                if isinstance(collection, (str, dict)):
                    return value in collection
                if hasattr(collection, "__iter__"):
                    return value in [_plain(v) for v in collection]
            return False

        if func_name in ("max", "min"):
            values = [self.evaluate(a, context) for a in args]
            numeric = [v for v in values if _is_number(v)]
            if numeric:
                return max(numeric) if func_name == "max" else min(numeric)
            return 0

        return None

    def _resolve_property(self, path: str, context: ExpressionContext) -> Any:
        """Resolve a property path like 'event.payload.card_id'."""
        parts = path.split(".")
        root = parts[0]

        if root == "event":
            obj = context.event
        elif root == "payload":
            obj = context.event.payload if context.event is not None else None
        elif root == "game":
            obj = context.game
        elif root in ("current_player", "currentPlayer"):
            obj = context.get_current_player()
        elif root in context.variables:
            obj = context.variables[root]
        else:
            return None

        for part in parts[1:]:
            if obj is None:
                return None
            obj = _step(obj, part)

        return obj


def _step(obj: Any, part: str) -> Any:
    """One property hop: dict key or attribute, camelCase falling back to snake_case."""
    for name in (part, _CAMEL.sub("_", part).lower()):
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif not name.startswith("_") and hasattr(obj, name):
            return getattr(obj, name)
    return None


def _plain(value: Any) -> Any:
    """Identifiers compare by their string value."""
    return value.value if isinstance(value, Identifier) else value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_literal(expr: str) -> tuple[Any, bool]:
    for cast in (int, float):
        try:
            return cast(expr), True
        except ValueError:
            pass

    if len(expr) >= 2 and expr[0] == expr[-1] and expr[0] in "\"'" and expr[0] not in expr[1:-1]:
        return expr[1:-1], True

    lowered = expr.lower()
    if lowered == "true":
        return True, True
    if lowered == "false":
        return False, True
    if lowered in ("null", "none", "undefined"):
        return None, True
    return None, False


def _scan(expr: str):
    """Yield (index, depth) for characters outside quotes."""
    quote = None
    depth = 0
    for i, ch in enumerate(expr):
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        yield i, depth


def _wrapped_in_parens(expr: str) -> bool:
    if not (expr.startswith("(") and expr.endswith(")")):
        return False
    for i, depth in _scan(expr):
        if depth == 0 and i < len(expr) - 1:
            return False
    return True


def _split(expr: str, operators: tuple[str, ...], last: bool = False) -> tuple[str, str, str] | None:
    """
    Split expr around the first (or last) top-level operator.

    Returns (left, operator, right) or None.
    """
    lowered = expr.lower()
    found = None
    for i, depth in _scan(expr):
        if depth != 0:
            continue
        for op in operators:
            if not lowered.startswith(op, i):
                continue
            if op in ("+", "-") and _is_unary(expr, i):
                continue
            found = (i, op)
            break
        if found and not last:
            break

    if not found:
        return None
    i, op = found
    left, right = expr[:i].strip(), expr[i + len(op):].strip()
    if not left or not right:
        return None
    return left, op.strip(), right


def _is_unary(expr: str, index: int) -> bool:
    before = expr[:index].rstrip()
    return not before or before[-1] in "=<>!+-*/(,&|"


def _split_args(args_str: str) -> list[str]:
    args = []
    start = 0
    for i, depth in _scan(args_str):
        if depth == 0 and args_str[i] == ",":
            args.append(args_str[start:i].strip())
            start = i + 1
    tail = args_str[start:].strip()
    if tail:
        args.append(tail)
    return args


# =============================================================================
# Parameter placeholders
# =============================================================================

def substitute_parameters(
    parameters: dict[str, Any],
    event: GameEvent,
    game: Game | None = None,
) -> dict[str, Any]:
    """
    Resolve $event.payload.<key>, $event.triggered_by and
    $game.current_player placeholders in parameter values.

    A value that is exactly one placeholder keeps the referenced value's
    type (an identifier stays an identifier); placeholders embedded in
    longer strings are replaced with their text. Missing values become "".
    """
    resolved = {}
    for key, value in parameters.items():
        if not isinstance(value, str):
            resolved[key] = value
            continue

        whole = _PLACEHOLDER.fullmatch(value.strip())
        if whole:
            resolved[key] = _placeholder_value(whole.group(1), event, game)
        else:
            resolved[key] = _PLACEHOLDER.sub(
                lambda m: _text(_placeholder_value(m.group(1), event, game)), value
            )
    return resolved


def _placeholder_value(name: str, event: GameEvent, game: Game | None) -> Any:
    if name.startswith("event.payload."):
        value = _step(event.payload, name[len("event.payload."):])
        return "" if value is None else value
    if name.startswith("event.triggered"):
        return event.triggered_by
    if game is None or game.current_player is None:
        return ""
    return game.current_player


def _text(value: Any) -> str:
    return str(_plain(value))
