"""Pulls pieces together to hand out a worker's Snowflake ID generator.

This module provides:
- create_generator: a function to get an IdGenerator considering a dev/prod environment
"""

import logging

from .config import config as environments
from .ids import IdGenerator, IdLayout, IdParts
from .utils.errors import ClockMovedBackwardsError, ConfigurationError, GenerationCancelledError
from .utils.logging import setup_logging

__all__ = [
    "create_generator",
    "IdGenerator",
    "IdLayout",
    "IdParts",
    "ClockMovedBackwardsError",
    "ConfigurationError",
    "GenerationCancelledError",
]


def _as_int(settings, name: str) -> int:
    value = getattr(settings, name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def create_generator(config_name="development", **overrides):
    """Initializes an IdGenerator from environment configuration.

    Args:
        config_name (str): One of the keys of ``snowfactory.config.config``
        **overrides: Keyword arguments passed to IdGenerator as they are,
            such as ``clock`` or ``sleeper``
    Returns:
        IdGenerator: A generator for the configured worker
    Raises:
        ConfigurationError: If the environment is unknown or holds invalid values
    """
    try:
        settings = environments[config_name]
    except KeyError:
        raise ConfigurationError(f"Unknown environment {config_name!r}") from None

    setup_logging(logging.getLogger(__name__), settings.DEBUG, settings.LOG_PATH)

    options = {
        "worker_id": _as_int(settings, "WORKER_ID"),
        "sequence_bits": _as_int(settings, "SEQUENCE_BITS"),
        "worker_bits": _as_int(settings, "WORKER_BITS"),
        "epoch": _as_int(settings, "EPOCH_MILLIS"),
    }
    options.update(overrides)
    return IdGenerator(**options)
