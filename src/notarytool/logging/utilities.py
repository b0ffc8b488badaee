"""Helpers for structured log calls and for logging error values."""

import logging
from typing import Any

from notarytool.errors.exceptions import HttpError, NotaryToolError

# Attributes every LogRecord already has; an extra with one of these names
# makes Logger.makeRecord raise KeyError.
_LOG_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

MAX_ERROR_MESSAGE_LENGTH = 500


def _safe_extra(fields: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value
        for key, value in fields.items()
        if key not in _LOG_RECORD_ATTRS and value is not None
    }


def error_fields(error: BaseException) -> dict[str, Any]:
    """
    Structured log fields describing an error.

    NotaryToolError values contribute their category, and HTTP errors their
    status and URL. The message is truncated to keep log lines bounded.
    """
    message = error.message if isinstance(error, NotaryToolError) else str(error)
    if len(message) > MAX_ERROR_MESSAGE_LENGTH:
        message = message[:MAX_ERROR_MESSAGE_LENGTH] + "..."

    fields: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": message,
    }
    if isinstance(error, NotaryToolError):
        fields["error_category"] = error.category.value
    if isinstance(error, HttpError):
        fields["http_status"] = error.http_status_code
        fields["http_url"] = error.request_url
    return fields


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **fields: Any,
) -> None:
    """
    Log with structured fields passed as keyword arguments.

    Fields whose value is None, or whose name collides with a LogRecord
    attribute, are dropped. ``exc_info`` is passed through to the logger.

    Example:
        log_with_context(
            logger, logging.INFO, "Submission reached terminal status",
            submission_id=str(info.id),
            status=info.status.value,
        )
    """
    exc_info = fields.pop("exc_info", None)
    logger.log(level, msg, exc_info=exc_info, extra=_safe_extra(fields))


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **fields: Any,
) -> None:
    """
    Log a raised exception or a returned error value.

    Error values that were never raised have no traceback, so only the
    structured error fields are attached for them.
    """
    extra = {**error_fields(exc), **fields}
    exc_info = exc if include_traceback and exc.__traceback__ is not None else None
    log_with_context(logger, level, msg, exc_info=exc_info, **extra)


__all__ = ["error_fields", "log_with_context", "log_exception"]
