"""
Base configuration module for grantcore.

This module provides the base settings class that the environment-specific
settings classes inherit from. It covers the options that change how grants
are loaded and resolved, plus the logging switches used by the package.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "GRANTCORE_"


class BaseAppSettings(BaseSettings):
    """
    Base settings class for access control configuration.

    All values can be overridden with environment variables prefixed with
    ``GRANTCORE_`` (e.g. ``GRANTCORE_LOG_LEVEL=DEBUG``) or from a ``.env`` file.

    Attributes:
        APP_NAME: Name used for the package loggers
        DEBUG: Flag to enable/disable debug mode (forces DEBUG log level)
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON_FORMAT: Emit log records as JSON
        LOG_FORMAT: Format string for plain text log records
        OWN_FALLBACK_TO_ANY: Let an "action:any" grant answer "action:own" queries
            when the role has no explicit "own" entry
        DEFAULT_POSSESSION: Possession used when a query or grant omits it
        LOCK_ON_LOAD: Lock the grants right after they are loaded at construction
    """

    APP_NAME: str = Field(default="grantcore")
    DEBUG: bool = Field(default=False)

    # Logging configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON_FORMAT: bool = Field(
        default=False, description="Emit log records as JSON"
    )
    LOG_FORMAT: Optional[str] = Field(
        default=None, description="Format string for plain text log records"
    )

    # Resolution configuration
    OWN_FALLBACK_TO_ANY: bool = Field(
        default=True,
        description="Use an 'action:any' grant when no 'action:own' grant exists",
    )
    DEFAULT_POSSESSION: str = Field(
        default="any", description='Possession used when omitted: "any" or "own"'
    )
    LOCK_ON_LOAD: bool = Field(
        default=False, description="Lock grants right after the initial load"
    )

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, value):
        """Upper-case the log level and reject unknown names."""
        level = str(value).strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(
                "LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL. "
                f"You provided: {value}"
            )
        return level

    @field_validator("DEFAULT_POSSESSION", mode="before")
    def validate_default_possession(cls, value):
        """
        Ensure DEFAULT_POSSESSION is a known possession.
        """
        possession = str(value).strip().lower()
        if possession not in {"any", "own"}:
            raise ValueError(
                "DEFAULT_POSSESSION must be 'any' or 'own'. " f"You provided: {value}"
            )
        return possession

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix=ENV_PREFIX,
        case_sensitive=True,
        extra="ignore",
    )
