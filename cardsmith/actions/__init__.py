"""
Actions - Validated, atomic state transitions.

Build an Action with one of its classmethod constructors, check it with
can_execute_action, then run it with execute_action (raises) or
apply_action (returns an ActionResult).
"""

from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import (
    apply_action,
    execute_action,
    validate_action,
    can_execute_action,
    explain_action,
)

__all__ = [
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "apply_action",
    "execute_action",
    "validate_action",
    "can_execute_action",
    "explain_action",
]
