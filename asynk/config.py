"""
asynk configuration

Process-wide settings, validated with pydantic and overridable from the
environment (``ASYNK_LOG_LEVEL``, ``ASYNK_ALLOW_BARE_YIELD``).
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, field_validator

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """
    Runtime settings.

    Attributes:
        log_level: Level applied to the ``asynk`` logger
        allow_bare_yield: Treat ``yield`` with no payload as a checkpoint
            (suspension on an already-fulfilled future of ``None``) instead
            of a non-future yield
    """

    log_level: str = "WARNING"
    allow_bare_yield: bool = True

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``ASYNK_*`` environment variables."""
        values = {}

        log_level = os.environ.get("ASYNK_LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level

        bare_yield = os.environ.get("ASYNK_ALLOW_BARE_YIELD")
        if bare_yield:
            values["allow_bare_yield"] = bare_yield.strip().lower() in _TRUE_VALUES

        return cls(**values)


_settings: Optional[Settings] = None


def configure_logging(level: str) -> None:
    """Sets the logging level for the asynk loggers."""
    logging.getLogger("asynk").setLevel(level)


def get_settings() -> Settings:
    """Return the active settings, loading them from the environment once."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        configure_logging(_settings.log_level)
    return _settings


def configure(**overrides) -> Settings:
    """
    Replace the active settings.

    Unspecified fields keep their current values.

    Example:
        configure(allow_bare_yield=False, log_level="DEBUG")
    """
    global _settings
    current = get_settings()
    _settings = Settings(**{**current.model_dump(), **overrides})
    configure_logging(_settings.log_level)
    return _settings
