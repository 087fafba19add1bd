"""Manages configuration variables.

This module provides:
- Config: a base class for pulling environment variables
- DevelopmentConfig: a dev config class for local runs
- ProductionConfig: a config class for production
- TestingConfig: a config class for the test suite
- config: a dict for getting configuration depending on environment
"""

import os

from dotenv import load_dotenv

from .ids import DEFAULT_SEQUENCE_BITS, DEFAULT_WORKER_BITS
from .utils.clock import DEFAULT_EPOCH

load_dotenv()


class Config:
    """Base class for pulling environment variables.

    Numbers are kept as raw strings and parsed when a generator is built.
    """

    WORKER_ID = os.getenv("WORKER_ID", "0")
    SEQUENCE_BITS = os.getenv("SEQUENCE_BITS", str(DEFAULT_SEQUENCE_BITS))
    WORKER_BITS = os.getenv("WORKER_BITS", str(DEFAULT_WORKER_BITS))
    EPOCH_MILLIS = os.getenv("EPOCH_MILLIS", str(DEFAULT_EPOCH))

    LOG_PATH = os.getenv("LOG_PATH", "logs/snowfactory.log")


class DevelopmentConfig(Config):
    """Config class with DEBUG on."""

    DEBUG = True


class ProductionConfig(Config):
    """Config class with DEBUG off."""

    DEBUG = False


class TestingConfig(Config):
    """Config class with DEBUG on and no log file."""

    DEBUG = True
    LOG_PATH = ""


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
