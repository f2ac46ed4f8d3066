"""
Rules - Declarative rules compiled into event listeners.

Rule definitions are persisted data: an event type, an optional condition
expression, a priority and an ordered list of action steps. The compiler
rebuilds the executable listener from that data.
"""

from .definition import RuleDefinition, RuleStep, extract_rules, resolve_action_type
from .expression import ExpressionContext, ExpressionEvaluator, substitute_parameters
from .validation import ValidationResult, validate_rule, validate_rules
from .compiler import CompiledRule, RuleCompiler, build_action, register_rules

__all__ = [
    "RuleDefinition",
    "RuleStep",
    "extract_rules",
    "resolve_action_type",
    "ExpressionContext",
    "ExpressionEvaluator",
    "substitute_parameters",
    "ValidationResult",
    "validate_rule",
    "validate_rules",
    "CompiledRule",
    "RuleCompiler",
    "build_action",
    "register_rules",
]
