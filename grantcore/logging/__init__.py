"""
Logging module for grantcore.

This module provides a simple logging interface
that integrates with the package settings.

Limitations:
- Only console (stdout) logging is supported out of the box.
- JSON logs include timestamp, level, logger, message and any ``extra`` values.
"""

from grantcore.logging.formatters import JsonFormatter
from grantcore.logging.manager import ensure_logger, get_logger, setup_logger

__all__ = [
    "get_logger",
    "ensure_logger",
    "setup_logger",
    "JsonFormatter",
]
