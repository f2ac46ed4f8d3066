"""
Error taxonomy for the engine.

- Construction validation errors: raised by primitive factories
- Action errors: precondition failures raised by the action library
- Event system errors: queue overflow and friends
- Listener errors: failures inside user-supplied reactions (collected, not raised)
"""

from __future__ import annotations


class CardsmithError(Exception):
    """Base class for all engine errors."""


class EntityValidationError(CardsmithError):
    """Raised when an entity fails construction or shape validation."""


class ActionError(CardsmithError):
    """Raised when an action's preconditions do not hold."""

    def __init__(self, message: str, action_type=None):
        self.action_type = action_type
        super().__init__(message)


class EventSystemError(CardsmithError):
    """Raised by the event manager."""


class EventQueueFullError(EventSystemError):
    """Raised when publishing to a manager whose queue is at capacity."""


class ListenerError(CardsmithError):
    """Wraps an exception raised inside a listener reaction."""

    def __init__(self, listener_id: str, cause: BaseException):
        self.listener_id = listener_id
        self.cause = cause
        super().__init__(f"Listener {listener_id} failed: {cause}")


class RuleValidationError(CardsmithError):
    """Raised when rule definitions fail validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Rule validation failed with {len(errors)} error(s)")


class ConfigError(CardsmithError):
    """Raised when engine configuration is invalid."""


class ProjectNotFoundError(CardsmithError):
    """Raised when a project is missing from the store."""
