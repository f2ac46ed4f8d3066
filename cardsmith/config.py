"""
Engine configuration.

Values come from environment variables, validated with pydantic:

    CARDSMITH_ENV                 deployment environment name
    CARDSMITH_MAX_QUEUE_SIZE      default event queue capacity
    CARDSMITH_EVENT_LOGGING       trace event dispatch ("1", "true", "yes")
    CARDSMITH_LOG_LEVEL           level for the cardsmith logger
    CARDSMITH_MAX_ACTION_ROUNDS   bound on listener-requested action rounds
"""

from __future__ import annotations
import logging
import os
from typing import Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

# Maximum depth of cascading event batches in a single processing pass.
MAX_RECURSION_DEPTH = 10

DEFAULT_MAX_QUEUE_SIZE = 1000

_TRUTHY = {"1", "true", "yes", "on"}


class EngineConfig(BaseModel):
    """Runtime settings for the engine."""
    env: str = "development"
    max_queue_size: int = Field(DEFAULT_MAX_QUEUE_SIZE, ge=1)
    enable_event_logging: bool = False
    log_level: str = "WARNING"
    max_action_rounds: int = Field(MAX_RECURSION_DEPTH, ge=1)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def load_config(environ: Mapping[str, str] | None = None) -> EngineConfig:
    """
    Build an EngineConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Raises:
        ConfigError: if a value is present but invalid
    """
    env = os.environ if environ is None else environ

    values: dict[str, object] = {}
    if "CARDSMITH_ENV" in env:
        values["env"] = env["CARDSMITH_ENV"]
    if "CARDSMITH_MAX_QUEUE_SIZE" in env:
        values["max_queue_size"] = env["CARDSMITH_MAX_QUEUE_SIZE"]
    if "CARDSMITH_EVENT_LOGGING" in env:
        values["enable_event_logging"] = env["CARDSMITH_EVENT_LOGGING"].strip().lower() in _TRUTHY
    if "CARDSMITH_LOG_LEVEL" in env:
        values["log_level"] = env["CARDSMITH_LOG_LEVEL"]
    if "CARDSMITH_MAX_ACTION_ROUNDS" in env:
        values["max_action_rounds"] = env["CARDSMITH_MAX_ACTION_ROUNDS"]

    try:
        return EngineConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid engine configuration: {e}") from e


def configure_logging(config: EngineConfig) -> None:
    """Apply the configured level to the cardsmith logger hierarchy."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("cardsmith").setLevel(config.log_level)
