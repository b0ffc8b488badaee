"""
Error taxonomy for the notary client.

Provides:
- NotaryToolError hierarchy, returned (not raised) by every operation
- ErrorCategory re-export for handling decisions

HTTP response classification lives in ``notarytool.errors.classifiers``.
"""

from notarytool.errors.exceptions import (
    AuthenticationError,
    ClientError4xx,
    ConnectionError,
    GeneralError,
    HttpError,
    InvalidPrivateKeyError,
    InvalidSubmissionIdError,
    JsonCreateError,
    JsonParseError,
    JsonWebTokenError,
    MalformedSubmissionIdError,
    NotaryToolError,
    OtherHttpError,
    PollingTimeout,
    PrivateKeyNotFoundError,
    ServerError5xx,
    SubmissionLogError,
    TokenCreationError,
)
from notarytool.types import ErrorCategory

__all__ = [
    # Enums
    "ErrorCategory",
    # Base class
    "NotaryToolError",
    # Identifier errors
    "MalformedSubmissionIdError",
    "InvalidSubmissionIdError",
    # Credential / auth errors
    "AuthenticationError",
    "JsonWebTokenError",
    "PrivateKeyNotFoundError",
    "InvalidPrivateKeyError",
    "TokenCreationError",
    # HTTP errors
    "HttpError",
    "ClientError4xx",
    "ServerError5xx",
    "OtherHttpError",
    # JSON errors
    "JsonParseError",
    "JsonCreateError",
    # Other
    "SubmissionLogError",
    "ConnectionError",
    "PollingTimeout",
    "GeneralError",
]
