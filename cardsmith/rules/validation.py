"""
Rule Validation - Structural checks for rule definitions.

Validates that:
1. Required fields are present (id, event type)
2. Every step names a known action
3. Every step carries the parameters its action needs
4. Rule ids are unique across a rule set
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

from ..errors import RuleValidationError
from .definition import REQUIRED_PARAMETERS, RuleDefinition, RuleStep, resolve_action_type


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        if not self.valid:
            raise RuleValidationError(self.errors)


def validate_rule(rule: RuleDefinition) -> ValidationResult:
    """Validate a single rule definition."""
    errors: list[str] = []
    warnings: list[str] = []

    if not rule.rule_id:
        errors.append("Rule has empty ID")
    if not isinstance(rule.event_type, str) or not rule.event_type.strip():
        errors.append(f"Rule '{rule.rule_id}' has no event type")
    if isinstance(rule.priority, bool) or not isinstance(rule.priority, int):
        errors.append(f"Rule '{rule.rule_id}' priority must be an integer")
    if rule.condition is not None and not isinstance(rule.condition, str):
        errors.append(f"Rule '{rule.rule_id}' condition must be an expression string")

    if not rule.actions:
        warnings.append(f"Rule '{rule.rule_id}' has no actions")
    if not rule.is_active:
        warnings.append(f"Rule '{rule.rule_id}' is inactive")

    for index, step in enumerate(rule.actions):
        errors.extend(f"Rule '{rule.rule_id}': {e}" for e in _validate_step(step, index))

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_rules(rules: Iterable[RuleDefinition]) -> ValidationResult:
    """Validate a rule set, including id uniqueness."""
    errors: list[str] = []
    warnings: list[str] = []
    seen: set[str] = set()

    for rule in rules:
        if rule.rule_id in seen:
            errors.append(f"Duplicate rule ID '{rule.rule_id}'")
        seen.add(rule.rule_id)

        result = validate_rule(rule)
        errors.extend(result.errors)
        warnings.extend(result.warnings)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def _validate_step(step: RuleStep, index: int) -> list[str]:
    name = step.step_id or f"#{index + 1}"
    action_type = resolve_action_type(step.action_type)
    if action_type is None:
        return [f"Step '{name}' has unknown action type '{step.action_type}'"]

    errors = []
    for param in REQUIRED_PARAMETERS[action_type]:
        value = step.parameters.get(param)
        if value is None or value == "":
            errors.append(f"Step '{name}' ({step.action_type}) is missing parameter '{param}'")
    return errors
