"""Handler wiring for applications that embed the notary client."""

import io
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from notarytool.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG
DEFAULT_BACKUP_COUNT = 7

PLAIN_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP stack loggers that log every connection at DEBUG
NOISY_LOGGERS = ("urllib3", "requests", "charset_normalizer")


def _stdout_stream():
    # Windows consoles default to a legacy code page
    if sys.platform == "win32":
        return io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    return sys.stdout


def _file_handler(
    log_file: Path,
    level: int,
    json_format: bool,
    rotation_when: str,
    backup_count: int,
) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        log_file, when=rotation_when, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FILE_FORMAT))
    return handler


def setup_logging(
    name: str = "notarytool",
    log_file: Path | str | None = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    rotation_when: str = "midnight",
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppress_noisy: bool = True,
) -> logging.Logger:
    """
    Attach console and optional file handlers to the ``name`` logger.

    The library only creates module loggers and never calls this itself.
    Handlers go on the named logger, not the root logger, so the host
    application's own logging setup is left alone. Calling again replaces
    the handlers from the previous call.

    Args:
        name: Logger to configure (default: the package logger)
        log_file: Optional file for time-rotated output
        json_format: JSON lines in the file (default) or plain text
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        rotation_when: TimedRotatingFileHandler ``when`` (default: midnight)
        backup_count: Rotated files to keep (default: 7)
        suppress_noisy: Raise HTTP stack loggers to WARNING

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(min(console_level, file_level) if log_file else console_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(_stdout_stream())
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(console_handler)

    if log_file is not None:
        logger.addHandler(
            _file_handler(Path(log_file), file_level, json_format, rotation_when, backup_count)
        )

    if suppress_noisy:
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug("Logging initialized", extra={"content_type": "json" if json_format else "text"})
    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger under the package hierarchy (typically ``__name__``)."""
    return logging.getLogger(name)


__all__ = ["setup_logging", "get_logger", "NOISY_LOGGERS"]
