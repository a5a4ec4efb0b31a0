"""
Structured JSON logging for Version Ledger.

Provides standardized logging with:
- JSON formatted output to stderr
- UTC timestamps
- Structured context fields (feature, instance_uid, version, ...)

All modules log through Python's standard logging module with
``logging.getLogger(__name__)``; this module only configures the root
handler. Log level defaults to INFO, use setup_logging(verbose=True) for DEBUG.

Examples:
    >>> from version_ledger.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbose=True)
    >>> logger = get_logger("storage.version_table")
    >>> logger.debug("Version set", extra={"context": {"feature": 1}})
"""

import json
import logging
import sys
from typing import Any

from version_ledger.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs log records as single-line JSON objects.

    Fields:
    - timestamp: ISO 8601 UTC timestamp
    - level: Log level name
    - component: Logger name
    - message: Rendered log message
    - context: Structured data passed via extra={"context": {...}}
    - exception: Formatted traceback when exc_info is set
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and isinstance(record.context, dict):
            log_entry["context"] = record.context

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # default=str keeps IntEnum members and paths serializable
        return json.dumps(log_entry, default=str)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure structured JSON logging for the application.

    Replaces any handlers on the root logger with a single stderr handler
    (stdout is reserved for command output).

    Args:
        verbose: If True, set log level to DEBUG. Otherwise, use INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers (prevents duplicate logs)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())

    root_logger.addHandler(handler)


def get_logger(component: str) -> logging.Logger:
    """Get a logger instance for a specific component."""
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> None:
    """
    Log a message with a structured context dict.

    Equivalent to logger.log(level, message, extra={"context": {...}}).

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.WARNING, etc.)
        message: Human-readable log message
        context: Optional dict with additional structured data
        exc_info: Attach the exception currently being handled

    Example:
        >>> log_with_context(
        ...     logger,
        ...     logging.DEBUG,
        ...     "Version set",
        ...     context={"feature": 1, "instance_uid": "cache1", "version": 2},
        ... )
    """
    extra = {"context": context} if context is not None else None
    logger.log(level, message, extra=extra, exc_info=exc_info)
