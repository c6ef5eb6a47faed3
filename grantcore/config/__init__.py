"""
Configuration module for grantcore.

This module provides:
- BaseAppSettings: The base class for settings, supporting environment variable loading.
- Environment-specific settings (development, testing, production).
- get_settings: Factory for loading the correct settings class based on GRANTCORE_ENV.

Example environment variables (to be placed in your project's .env or environment):

GRANTCORE_ENV=production  # Options: development, testing, production
GRANTCORE_DEBUG=false
GRANTCORE_LOG_LEVEL=INFO
GRANTCORE_LOG_JSON_FORMAT=true
GRANTCORE_OWN_FALLBACK_TO_ANY=true
GRANTCORE_DEFAULT_POSSESSION=any
GRANTCORE_LOCK_ON_LOAD=false
"""

from .base import BaseAppSettings
from .development import DevelopmentSettings
from .production import ProductionSettings
from .settings import get_settings
from .testing import TestingSettings

__all__ = [
    "BaseAppSettings",
    "get_settings",
    "DevelopmentSettings",
    "ProductionSettings",
    "TestingSettings",
]
