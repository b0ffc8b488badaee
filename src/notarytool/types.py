"""
Core types and protocols used across modules.

This module provides the shared enums and callable protocols used by the
client, the request pipeline and the polling engine.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    The library never retries on its own. The category is carried on every
    error value so callers (and log queries) can decide what to do next.

    Categories:
        TRANSIENT: Failures that may succeed if the call is repeated later
                   (e.g., connection resets, 5xx responses)
        AUTH: Credential problems requiring corrective action
              (e.g., missing key file, 401/403 responses)
        PERMANENT: Failures that will not succeed on repeat
                   (e.g., malformed identifiers, 4xx responses, bad JSON)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class Clock(Protocol):
    """Source of the current time (timezone-aware, UTC)."""

    def __call__(self) -> datetime: ...


class DelayFunction(Protocol):
    """
    Caller-supplied polling delay.

    Receives the 1-based attempt index that just completed and returns the
    number of seconds to sleep before the next attempt.
    """

    def __call__(self, attempt: int) -> float: ...


class ProgressCallback(Protocol):
    """
    Caller-supplied polling observer.

    Invoked after every successful status poll with the 1-based attempt
    index and the status response.
    """

    def __call__(self, attempt: int, response: Any) -> None: ...


__all__ = [
    "ErrorCategory",
    "Clock",
    "DelayFunction",
    "ProgressCallback",
]
