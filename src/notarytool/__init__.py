"""
Client library for the notary web service.

Modules:
    auth        - ES256 bearer tokens and their lifecycle
    api         - Wire schemas, domain records, request pipeline
    errors      - Error taxonomy and HTTP response classification
    polling     - Bounded status polling with caller-supplied backoff
    logging     - Structured JSON/console logging with context
    config      - YAML/.env configuration

All operations are synchronous and return ``(value, error)`` tuples.
"""

from notarytool.types import ErrorCategory
from notarytool.api.models import Status, SubmissionId
from notarytool.client import NotaryToolClient
from notarytool.polling import (
    PollingOutcome,
    PollingState,
    exponential_backoff,
    fixed_delay,
    no_delay,
)

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "NotaryToolClient",
    "SubmissionId",
    "Status",
    "PollingOutcome",
    "PollingState",
    "exponential_backoff",
    "fixed_delay",
    "no_delay",
]
