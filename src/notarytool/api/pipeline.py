"""
Request pipeline for the Notary API.

One authenticated call, end to end:

    token -> request -> transport -> ResponseMetadata -> classify -> build

Every stage returns a ``(value, error)`` tuple and the pipeline stops at the
first error. The transport response is read once into ResponseMetadata and
closed before the call returns, on every path.
"""

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import requests

from notarytool.api.metadata import ResponseMetadata
from notarytool.api.responses import parse_http_url
from notarytool.auth.token_manager import TokenManager
from notarytool.errors.classifiers import ResponseClassifier, SubmissionLogClassifier
from notarytool.errors.exceptions import (
    ConnectionError,
    GeneralError,
    NotaryToolError,
    SubmissionLogError,
)
from notarytool.logging.context import get_log_context
from notarytool.logging.utilities import error_fields
from notarytool.types import Clock

logger = logging.getLogger(__name__)

BASE_URL = "https://appstoreconnect.apple.com/notary/v2"
SUBMISSIONS_ENDPOINT = "submissions"
USER_AGENT = "notarytool-python/0.1.0"
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_READ_TIMEOUT_SECONDS = 60.0

ResultT = TypeVar("ResultT")
ModelBuilder = Callable[[ResponseMetadata], tuple[ResultT | None, NotaryToolError | None]]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RequestPipeline:
    """
    Executes Notary API calls over a shared ``requests.Session``.

    Usage:
        pipeline = RequestPipeline(token_manager)
        response, error = pipeline.execute(
            "GET", f"submissions/{submission_id}",
            SubmissionStatusResponse.from_metadata,
        )
    """

    def __init__(
        self,
        token_manager: TokenManager,
        base_url: str = BASE_URL,
        session: requests.Session | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        read_timeout: float = DEFAULT_READ_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        clock: Clock | None = None,
    ):
        self.token_manager = token_manager
        self.base_url = base_url.rstrip("/") if base_url else ""
        self.session = session or requests.Session()
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.user_agent = user_agent
        self.classifier = ResponseClassifier()
        self.log_classifier = SubmissionLogClassifier()
        self._clock = clock or _utc_now

    @staticmethod
    def _get_context_ids() -> dict[str, str]:
        return {k: v for k, v in get_log_context().items() if v}

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    def close(self) -> None:
        self.session.close()

    def execute(
        self,
        method: str,
        endpoint: str,
        builder: ModelBuilder,
        json_body: str | None = None,
    ) -> tuple[Any, NotaryToolError | None]:
        """
        Run one authenticated call and build its response envelope.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL (e.g. ``submissions/<id>``)
            builder: Turns the captured metadata into the response envelope
            json_body: Pre-encoded JSON request body, if any

        Returns:
            Tuple of (response envelope or None, NotaryToolError or None)
        """
        if parse_http_url(self.base_url) is None:
            return None, GeneralError(f"Invalid base URL: '{self.base_url}'")

        token, error = self.token_manager.current_token()
        if error is not None:
            return None, error

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {token.encoded}",
            "User-Agent": self.user_agent,
        }
        if json_body is not None:
            headers["Content-Type"] = "application/json"

        metadata, error = self._send(method, url, endpoint, headers, json_body)
        if error is not None:
            return None, error

        error = self.classifier.classify(metadata)
        if error is not None:
            logger.warning(
                "API request failed",
                extra={
                    **self._get_context_ids(),
                    "api_endpoint": endpoint,
                    "api_method": method,
                    "api_url": url,
                    **error_fields(error),
                },
            )
            return None, error

        result, error = builder(metadata)
        if error is not None:
            logger.warning(
                "API response could not be parsed",
                extra={
                    **self._get_context_ids(),
                    "api_endpoint": endpoint,
                    "api_method": method,
                    "http_status": metadata.status_code,
                    "error_message": error.message,
                },
            )
        return result, error

    def fetch_submission_log(self, url: str) -> tuple[str | None, NotaryToolError | None]:
        """
        Download developer log text from its pre-signed URL.

        Only the User-Agent header is sent; the URL carries its own
        credentials.

        Returns:
            Tuple of (log text or None, NotaryToolError or None)
        """
        if parse_http_url(url) is None:
            return None, SubmissionLogError(
                f"Invalid submission log URL: '{url}'",
                exception_msg="not an absolute http(s) URL",
            )

        metadata, error = self._send(
            "GET", url, "developer_log", {"User-Agent": self.user_agent}, None
        )
        if error is not None:
            return None, error

        error = self.log_classifier.classify(metadata)
        if error is not None:
            logger.warning(
                "Submission log download failed",
                extra={
                    **self._get_context_ids(),
                    "url": url,
                    **error_fields(error),
                },
            )
            return None, error

        return metadata.raw_contents or "", None

    def _send(
        self,
        method: str,
        url: str,
        endpoint: str,
        headers: dict[str, str],
        body: str | None,
    ) -> tuple[ResponseMetadata | None, ConnectionError | None]:
        ctx = self._get_context_ids()
        logger.debug(
            "API request starting",
            extra={
                **ctx,
                "api_endpoint": endpoint,
                "api_method": method,
                "api_url": url,
                "has_body": body is not None,
            },
        )

        start_time = time.perf_counter()
        try:
            with self.session.request(
                method,
                url,
                headers=headers,
                data=body.encode("utf-8") if body is not None else None,
                timeout=self.timeout,
            ) as response:
                metadata = ResponseMetadata.from_response(
                    response, received_timestamp=self._clock()
                )
        except requests.RequestException as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "API connection error",
                exc_info=True,
                extra={
                    **ctx,
                    "api_endpoint": endpoint,
                    "api_method": method,
                    "api_url": url,
                    "duration_ms": round(duration_ms, 1),
                    "error_category": "transient",
                    "error_message": str(e),
                },
            )
            return None, ConnectionError(str(e), cause=e)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "API request completed",
            extra={
                **ctx,
                "api_endpoint": endpoint,
                "api_method": method,
                "http_status": metadata.status_code,
                "duration_ms": round(duration_ms, 1),
            },
        )
        return metadata, None


__all__ = [
    "BASE_URL",
    "SUBMISSIONS_ENDPOINT",
    "USER_AGENT",
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
    "DEFAULT_READ_TIMEOUT_SECONDS",
    "RequestPipeline",
]
