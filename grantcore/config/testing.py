"""
Testing environment specific settings.

This module contains settings that are specific to the testing environment.
"""

from .base import BaseAppSettings


class TestingSettings(BaseAppSettings):
    """
    Settings class for testing environment.

    Keeps logs quiet and never locks grants on load so fixtures can mutate
    them freely.

    Attributes:
        DEBUG: Off, so the WARNING level is not overridden
        LOG_LEVEL: Only warnings and errors are emitted
        LOCK_ON_LOAD: Off by default in tests
    """

    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"
    LOCK_ON_LOAD: bool = False
