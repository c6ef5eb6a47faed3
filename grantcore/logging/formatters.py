"""
Custom log formatters for grantcore.

This module contains formatters that determine how log records are formatted.
Currently supports JSON formatting for structured logging.
"""

import json
import logging
from datetime import datetime

# Attributes every LogRecord has; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    Format log records as JSON for structured logging.

    Timestamp, level, logger name and message are always included. Values
    passed through ``extra=`` (e.g. ``role`` or ``resource``) are added as
    top level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the specified record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string containing the formatted log record
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value
        return json.dumps(log_data, default=str)
