"""JSON and console log formatters.

Both formatters pick up the ambient operation/submission context and redact
credentials: bearer tokens anywhere in text, and the signing parameters of
pre-signed developer log URLs.
"""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any, Callable

from notarytool.logging.context import get_log_context
from notarytool.utils.json_serializers import json_serializer

REDACTED = "[REDACTED]"

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+")

# Query parameters that make a pre-signed storage URL usable by anyone
_SIGNED_QUERY_RE = re.compile(
    r"""([?&])(X-Amz-Signature|X-Amz-Credential|X-Amz-Security-Token|sig|token|key|secret)=[^&#\s'"]*""",
    re.IGNORECASE,
)


def redact_text(text: str) -> str:
    return _BEARER_RE.sub(rf"\1{REDACTED}", text)


def redact_url(url: str) -> str:
    return _SIGNED_QUERY_RE.sub(rf"\1\2={REDACTED}", url)


def redact(text: str) -> str:
    """Redact bearer tokens and signed URL parameters anywhere in free text."""
    return redact_url(redact_text(text))


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Only the structured fields declared in FIELDS are copied from the record;
    each maps to a converter applied before output (None keeps the value as is).
    A value the converter rejects is written as null.
    """

    FIELDS: dict[str, Callable[[Any], Any] | None] = {
        # Request pipeline
        "api_endpoint": None,
        "api_method": None,
        "api_url": redact_url,
        "has_body": bool,
        "http_status": int,
        "http_url": redact_url,
        "duration_ms": float,
        "content_type": None,
        "authorization": redact,
        # Submissions
        "submission_id": None,
        "submission_name": None,
        "status": None,
        "status_text": None,
        "created_date_text": None,
        "url": redact_url,
        # Polling
        "attempt": int,
        "max_poll_count": int,
        "delay_seconds": float,
        "polling_state": None,
        # Credentials (identifiers only)
        "key_id": None,
        "private_key_file": None,
        # Errors
        "error_type": None,
        "error_category": None,
        "error_message": redact,
    }

    CONTEXT_FIELDS = ("operation", "submission_id")

    @staticmethod
    def _timestamp(record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def _convert(self, name: str, value: Any) -> Any:
        converter = self.FIELDS[name]
        if converter is None:
            return value
        if converter in (redact, redact_text, redact_url) and not isinstance(value, str):
            return value
        try:
            return converter(value)
        except (TypeError, ValueError):
            return None

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self._timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
        }

        context = get_log_context()
        entry.update({name: context[name] for name in self.CONTEXT_FIELDS if context.get(name)})

        if record.levelno == logging.DEBUG or record.levelno >= logging.ERROR:
            entry["file"] = f"{record.filename}:{record.lineno}"

        # Explicit extras override the ambient context
        for name in self.FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = self._convert(name, value)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": getattr(exc_type, "__name__", None),
                "message": redact(str(exc_value)) if exc_value is not None else None,
                "stacktrace": redact(self.formatException(record.exc_info)),
            }

        return json.dumps(entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Single-line human-readable output.

        2024-03-01 12:00:00 - INFO - [get_submission_status] [sid:2efe2717] message (http_status=200)

    Level names are colored only when stdout is a terminal.
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    # Shown after the message when present on the record
    SUFFIX_FIELDS = ("http_status", "attempt", "status", "duration_ms")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _level(self, levelname: str) -> str:
        color = self.LEVEL_COLORS.get(levelname) if self._use_colors else None
        return f"{color}{levelname}{self.RESET}" if color else levelname

    @staticmethod
    def _tags(record: logging.LogRecord) -> str:
        context = get_log_context()
        operation = getattr(record, "operation", None) or context["operation"]
        submission_id = getattr(record, "submission_id", None) or context["submission_id"]

        tags = []
        if operation:
            tags.append(f"[{operation}]")
        if submission_id:
            tags.append(f"[sid:{str(submission_id)[:8]}]")
        return " ".join(tags)

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        parts = [when, self._level(record.levelname)]

        message = redact(record.getMessage())
        tags = self._tags(record)
        if tags:
            message = f"{tags} {message}"

        suffix = [
            f"{name}={getattr(record, name)}"
            for name in self.SUFFIX_FIELDS
            if getattr(record, name, None) is not None
        ]
        if suffix:
            message = f"{message} ({', '.join(suffix)})"

        line = " - ".join([*parts, message])
        if record.exc_info:
            line = f"{line}\n{redact(self.formatException(record.exc_info))}"
        return line


__all__ = ["JSONFormatter", "ConsoleFormatter", "redact", "redact_text", "redact_url"]
