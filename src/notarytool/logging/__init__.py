"""
Structured logging for the notary client.

Provides JSON and console formatters with credential redaction, context
variables for the current operation and submission id, and helpers for
structured log calls and error values.
"""

from notarytool.logging.context import (
    LogContext,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from notarytool.logging.formatters import ConsoleFormatter, JSONFormatter
from notarytool.logging.setup import get_logger, setup_logging
from notarytool.logging.utilities import error_fields, log_exception, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    "LogContext",
    # Utilities
    "error_fields",
    "log_with_context",
    "log_exception",
]
