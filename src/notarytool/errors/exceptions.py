"""
Error taxonomy for the notary client.

Every public operation returns errors as values: a ``(value, error)`` tuple
where the error side is one of the classes below. They subclass ``Exception``
so a caller can choose to raise them, but nothing in this package does.
"""

from typing import TYPE_CHECKING

from notarytool.types import ErrorCategory

if TYPE_CHECKING:
    from notarytool.api.metadata import ResponseMetadata


class NotaryToolError(Exception):
    """
    Base class for all notary client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for handling decisions
        cause: Original exception if wrapping
        context: Additional context dict for logging and debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def error_type(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        parts = [self.message]
        # Pass-through errors reuse the cause text as their message
        if self.cause and str(self.cause) != self.message:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Submission Identifier Errors
# =============================================================================


class MalformedSubmissionIdError(NotaryToolError):
    """Identifier string does not match the submission id pattern."""

    category = ErrorCategory.PERMANENT

    def __init__(self, malformed_id: str):
        super().__init__(
            f"Submission id is malformed: '{malformed_id}'",
            context={"malformed_id": malformed_id},
        )
        self.malformed_id = malformed_id


class InvalidSubmissionIdError(NotaryToolError):
    """Well-formed identifier the service does not know about (structured 404)."""

    category = ErrorCategory.PERMANENT

    def __init__(
        self,
        message: str,
        response_metadata: "ResponseMetadata | None" = None,
    ):
        super().__init__(message)
        self.response_metadata = response_metadata


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(NotaryToolError):
    """The service rejected the credentials (HTTP 401 or 403)."""

    category = ErrorCategory.AUTH

    DEFAULT_MESSAGE = (
        "Authentication error, the key, key id or issuer id may be invalid."
    )

    def __init__(
        self,
        message: str = DEFAULT_MESSAGE,
        response_metadata: "ResponseMetadata | None" = None,
    ):
        context = {}
        if response_metadata is not None:
            context["http_status"] = response_metadata.status_code
        super().__init__(message, context=context)
        self.response_metadata = response_metadata


class JsonWebTokenError(NotaryToolError):
    """Base class for failures while producing the signed bearer token."""

    category = ErrorCategory.AUTH


class PrivateKeyNotFoundError(JsonWebTokenError):
    """Private key file does not exist or cannot be read."""

    def __init__(self, path: str, cause: Exception | None = None):
        super().__init__(
            f"Private key file not found: '{path}'",
            cause=cause,
            context={"private_key_file": path},
        )
        self.path = path


class InvalidPrivateKeyError(JsonWebTokenError):
    """Key material could not be decoded into an EC private key."""

    def __init__(self, exception_msg: str, cause: Exception | None = None):
        super().__init__(f"Invalid private key: {exception_msg}", cause=cause)
        self.exception_msg = exception_msg


class TokenCreationError(JsonWebTokenError):
    """Signing the token failed for any reason other than the key itself."""

    def __init__(self, exception_msg: str, cause: Exception | None = None):
        super().__init__(
            f"Error creating JSON Web Token: {exception_msg}", cause=cause
        )
        self.exception_msg = exception_msg


# =============================================================================
# HTTP Errors
# =============================================================================


class HttpError(NotaryToolError):
    """
    Base class for non-2xx responses that are not handled more specifically.

    Carries the status code, status message, request URL and body text, plus
    the full ResponseMetadata for diagnostics.
    """

    def __init__(
        self,
        message: str,
        http_status_code: int,
        http_status_message: str,
        request_url: str,
        content_body: str | None = None,
        response_metadata: "ResponseMetadata | None" = None,
    ):
        super().__init__(
            message,
            context={
                "http_status": http_status_code,
                "http_url": request_url,
            },
        )
        self.http_status_code = http_status_code
        self.http_status_message = http_status_message
        self.request_url = request_url
        self.content_body = content_body
        self.response_metadata = response_metadata


class ClientError4xx(HttpError):
    """HTTP 4xx response."""

    category = ErrorCategory.PERMANENT


class ServerError5xx(HttpError):
    """HTTP 5xx response."""

    category = ErrorCategory.TRANSIENT


class OtherHttpError(HttpError):
    """Any non-2xx status outside the 4xx/5xx ranges."""

    category = ErrorCategory.UNKNOWN


# =============================================================================
# JSON Errors
# =============================================================================


class JsonParseError(NotaryToolError):
    """Response body is missing, is not JSON, or does not match its schema."""

    category = ErrorCategory.PERMANENT

    def __init__(
        self,
        message: str,
        json_string: str | None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.json_string = json_string


class JsonCreateError(NotaryToolError):
    """Request body could not be built from the supplied data."""

    category = ErrorCategory.PERMANENT

    def __init__(self, message: str, data: object, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.data = data


# =============================================================================
# Other Errors
# =============================================================================


class SubmissionLogError(NotaryToolError):
    """The developer log could not be fetched from its URL or saved."""

    category = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        exception_msg: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.exception_msg = exception_msg


class ConnectionError(NotaryToolError):
    """Transport failure (timeout, reset, premature close).

    The message is the transport's own text, passed through unchanged.
    """

    category = ErrorCategory.TRANSIENT


class PollingTimeout(NotaryToolError):
    """Polling bound reached with no terminal submission status observed."""

    category = ErrorCategory.TRANSIENT

    def __init__(self, max_count: int):
        super().__init__(
            f"Polling max count of {max_count}, has been reached.",
            context={"max_poll_count": max_count},
        )
        self.max_count = max_count


class GeneralError(NotaryToolError):
    """Anything not covered by a more specific error."""

    category = ErrorCategory.UNKNOWN


__all__ = [
    "NotaryToolError",
    "MalformedSubmissionIdError",
    "InvalidSubmissionIdError",
    "AuthenticationError",
    "JsonWebTokenError",
    "PrivateKeyNotFoundError",
    "InvalidPrivateKeyError",
    "TokenCreationError",
    "HttpError",
    "ClientError4xx",
    "ServerError5xx",
    "OtherHttpError",
    "JsonParseError",
    "JsonCreateError",
    "SubmissionLogError",
    "ConnectionError",
    "PollingTimeout",
    "GeneralError",
]
