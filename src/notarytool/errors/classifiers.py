"""
HTTP response classification.

Turns a captured ResponseMetadata into either None (success, body parsing is
up to the caller) or exactly one NotaryToolError.
"""

import logging

from notarytool.api.metadata import ResponseMetadata
from notarytool.api.responses import parse_error_response
from notarytool.errors.exceptions import (
    AuthenticationError,
    ClientError4xx,
    HttpError,
    InvalidSubmissionIdError,
    NotaryToolError,
    OtherHttpError,
    ServerError5xx,
)

logger = logging.getLogger(__name__)


class ResponseClassifier:
    """
    Classifier for authenticated Notary API calls.

    Mapping:
        2xx     -> None (success)
        401/403 -> AuthenticationError
        404     -> InvalidSubmissionIdError when the body follows the vendor
                   error schema, otherwise ClientError4xx
        4xx     -> ClientError4xx
        5xx     -> ServerError5xx
        other   -> OtherHttpError
    """

    AUTH_STATUSES: frozenset[int] = frozenset({401, 403})
    CLIENT_ERROR_MESSAGE = "Client error"
    SERVER_ERROR_MESSAGE = "Server error"
    OTHER_ERROR_MESSAGE = "Unexpected HTTP status"
    structured_404 = True

    def classify(self, metadata: ResponseMetadata) -> NotaryToolError | None:
        status = metadata.status_code
        if metadata.is_successful:
            return None

        if status in self.AUTH_STATUSES:
            return AuthenticationError(response_metadata=metadata)

        if status == 404 and self.structured_404:
            invalid_id = self._invalid_submission_id(metadata)
            if invalid_id is not None:
                return invalid_id

        if 400 <= status < 500:
            return self._http_error(ClientError4xx, self.CLIENT_ERROR_MESSAGE, metadata)
        if 500 <= status < 600:
            return self._http_error(ServerError5xx, self.SERVER_ERROR_MESSAGE, metadata)
        return self._http_error(OtherHttpError, self.OTHER_ERROR_MESSAGE, metadata)

    @staticmethod
    def _http_error(
        error_cls: type[HttpError], label: str, metadata: ResponseMetadata
    ) -> HttpError:
        return error_cls(
            f"{label}: {metadata.status_string}",
            http_status_code=metadata.status_code,
            http_status_message=metadata.status_message,
            request_url=metadata.request_url,
            content_body=metadata.raw_contents,
            response_metadata=metadata,
        )

    @staticmethod
    def _invalid_submission_id(
        metadata: ResponseMetadata,
    ) -> InvalidSubmissionIdError | None:
        if is_general_404(metadata):
            return None

        errors, parse_error = parse_error_response(metadata.raw_contents)
        if parse_error is not None or not errors:
            logger.debug(
                "404 body is not a vendor error response",
                extra={"http_url": metadata.request_url, "error_message": str(parse_error)},
            )
            return None

        return InvalidSubmissionIdError(errors[0].detail, response_metadata=metadata)


class SubmissionLogClassifier(ResponseClassifier):
    """
    Classifier for the unauthenticated developer-log download.

    The log URL is a pre-signed storage URL, so 401/403 are ordinary client
    errors and 404 bodies are never vendor error responses.
    """

    AUTH_STATUSES: frozenset[int] = frozenset()
    CLIENT_ERROR_MESSAGE = "Client error downloading submission log"
    SERVER_ERROR_MESSAGE = "Server error downloading submission log"
    structured_404 = False


def is_general_404(metadata: ResponseMetadata) -> bool:
    """True when a 404 carries no structured body (plain text or empty)."""
    content_type = (metadata.content_type or "").lower()
    if "text/plain" in content_type:
        return True
    if metadata.content_length == 0:
        return True
    return not (metadata.raw_contents or "").strip()


__all__ = [
    "ResponseClassifier",
    "SubmissionLogClassifier",
    "is_general_404",
]
