"""
Production environment specific settings.

This module contains settings that are specific to the production environment.
"""

from .base import BaseAppSettings


class ProductionSettings(BaseAppSettings):
    """
    Settings class for production environment.

    Attributes:
        DEBUG: Always False in production
        LOG_JSON_FORMAT: Structured logs for aggregation services
        LOG_LEVEL: Only warnings and errors, so grant changes stay out of host logs
    """

    DEBUG: bool = False
    LOG_JSON_FORMAT: bool = True
    LOG_LEVEL: str = "WARNING"
