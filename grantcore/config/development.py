"""
Development environment specific settings.
"""

from .base import BaseAppSettings


class DevelopmentSettings(BaseAppSettings):
    """
    Settings class for development environment.

    Attributes:
        DEBUG: Always True in development
        LOG_LEVEL: Verbose logging while iterating on grants
    """

    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
