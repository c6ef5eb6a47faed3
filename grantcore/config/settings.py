"""
Settings management module.

This module handles the loading of environment-specific settings
based on the GRANTCORE_ENV environment variable.
"""

import os

from .base import ENV_PREFIX
from .development import DevelopmentSettings
from .production import ProductionSettings
from .testing import TestingSettings


def get_settings():
    """
    Get the appropriate settings instance for the current environment.

    The environment is determined by the GRANTCORE_ENV environment variable.
    If not set, defaults to 'production', which only logs warnings, so an
    embedded engine stays quiet unless asked otherwise.

    Returns:
        BaseAppSettings: An instance of environment-specific settings
    """
    env = os.getenv(f"{ENV_PREFIX}ENV", "production").strip().lower()
    if env == "development":
        return DevelopmentSettings()
    elif env == "testing":
        return TestingSettings()
    return ProductionSettings()
