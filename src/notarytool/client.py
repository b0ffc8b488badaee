"""
Notary API client.

Entry points for the notary web service: submit software, check the status
of a submission, fetch its developer log, list previous submissions, and
poll a submission until it completes. Every call returns a
``(value, error)`` tuple; nothing here raises for service or transport
failures.

Usage:
    client, error = NotaryToolClient.create(
        key_id="ABC123DEFG",
        issuer_id="69a6de7e-...",
        private_key_file=Path("AuthKey_ABC123DEFG.p8"),
    )
    with client:
        submission, error = client.submit_software(Path("MyApp.zip"))
        ...
        outcome = client.poll_submission_status(
            submission.id, max_poll_count=30,
            delay_function=exponential_backoff(base_delay=10, max_delay=120),
        )
"""

import hashlib
import logging
from datetime import timedelta
from pathlib import Path

import requests
from pydantic import ValidationError

from notarytool.api.models import SubmissionId
from notarytool.api.pipeline import (
    BASE_URL,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_READ_TIMEOUT_SECONDS,
    SUBMISSIONS_ENDPOINT,
    USER_AGENT,
    RequestPipeline,
)
from notarytool.api.responses import (
    NewSubmissionResponse,
    SubmissionListResponse,
    SubmissionLogUrlResponse,
    SubmissionStatusResponse,
)
from notarytool.api.schemas import NewSubmissionRequestJson, Notification
from notarytool.auth.token_manager import DEFAULT_TOKEN_LIFETIME, TokenManager
from notarytool.config.config import NotaryConfig
from notarytool.errors.exceptions import (
    GeneralError,
    JsonCreateError,
    JsonWebTokenError,
    NotaryToolError,
    SubmissionLogError,
)
from notarytool.logging.context import LogContext
from notarytool.logging.utilities import error_fields
from notarytool.polling import PollingEngine, PollingOutcome
from notarytool.types import Clock, DelayFunction, ProgressCallback

logger = logging.getLogger(__name__)

_HASH_CHUNK_SIZE = 1024 * 1024


def calculate_sha256(path: Path) -> str:
    """Hex SHA-256 digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


class NotaryToolClient:
    """
    Synchronous client for the notary web service.

    Owns one TokenManager (the cached bearer token) and one
    ``requests.Session``. Intended for use from a single thread.
    """

    def __init__(
        self,
        token_manager: TokenManager,
        base_url: str = BASE_URL,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        read_timeout: float = DEFAULT_READ_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        session: requests.Session | None = None,
        clock: Clock | None = None,
    ):
        self.token_manager = token_manager
        self.pipeline = RequestPipeline(
            token_manager,
            base_url=base_url,
            session=session,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            user_agent=user_agent,
            clock=clock,
        )

    @classmethod
    def create(
        cls,
        key_id: str,
        issuer_id: str,
        private_key_file: Path | str | None = None,
        *,
        private_key_pem: bytes | str | None = None,
        token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        base_url: str = BASE_URL,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        read_timeout: float = DEFAULT_READ_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        session: requests.Session | None = None,
        clock: Clock | None = None,
    ) -> tuple["NotaryToolClient | None", JsonWebTokenError | None]:
        """
        Build a client, loading the private key and signing the first token.

        Returns:
            Tuple of (NotaryToolClient or None, JsonWebTokenError or None)
        """
        token_manager, error = TokenManager.create(
            key_id,
            issuer_id,
            private_key_file,
            private_key_pem=private_key_pem,
            lifetime=token_lifetime,
            clock=clock,
        )
        if error is not None:
            logger.warning(
                "Could not create bearer token",
                extra={"key_id": key_id, **error_fields(error)},
            )
            return None, error

        return (
            cls(
                token_manager,
                base_url=base_url,
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
                user_agent=user_agent,
                session=session,
                clock=clock,
            ),
            None,
        )

    @classmethod
    def from_config(
        cls,
        config: NotaryConfig,
        session: requests.Session | None = None,
    ) -> tuple["NotaryToolClient | None", JsonWebTokenError | None]:
        return cls.create(
            config.key_id,
            config.issuer_id,
            config.private_key_path,
            token_lifetime=config.token_lifetime,
            base_url=config.base_url,
            connect_timeout=config.connect_timeout_seconds,
            read_timeout=config.read_timeout_seconds,
            user_agent=config.user_agent,
            session=session,
        )

    def close(self) -> None:
        self.pipeline.close()

    def __enter__(self) -> "NotaryToolClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # =========================================================================
    # Submit Software
    # =========================================================================

    def submit(
        self,
        submission_name: str,
        sha256: str,
        notifications: list[Notification] | None = None,
    ) -> tuple[NewSubmissionResponse | None, NotaryToolError | None]:
        """
        Start a new submission.

        Args:
            submission_name: Name of the software file being submitted
            sha256: Hex SHA-256 digest of the software file
            notifications: Optional webhook notifications

        Returns:
            Tuple of (NewSubmissionResponse or None, NotaryToolError or None).
            The response holds the credentials for uploading the file.
        """
        data = {
            "submissionName": submission_name,
            "sha256": sha256,
            "notifications": notifications or [],
        }
        try:
            body = NewSubmissionRequestJson.model_validate(data).to_json()
        except ValidationError as e:
            return None, JsonCreateError(
                f"Could not create submission request: {e}", data, cause=e
            )

        with LogContext(operation="submit_software"):
            logger.info(
                "Submitting software",
                extra={"submission_name": submission_name},
            )
            return self.pipeline.execute(
                "POST",
                SUBMISSIONS_ENDPOINT,
                NewSubmissionResponse.from_metadata,
                json_body=body,
            )

    def submit_software(
        self, software_path: Path | str
    ) -> tuple[NewSubmissionResponse | None, NotaryToolError | None]:
        """Hash a software file and start a submission named after it."""
        path = Path(software_path)
        try:
            sha256 = calculate_sha256(path)
        except OSError as e:
            return None, GeneralError(f"Could not read software file '{path}': {e}", cause=e)

        logger.debug(
            "Calculated software digest",
            extra={"submission_name": path.name},
        )
        return self.submit(path.name, sha256)

    # =========================================================================
    # Submission Status
    # =========================================================================

    def get_submission_status(
        self, submission_id: SubmissionId
    ) -> tuple[SubmissionStatusResponse | None, NotaryToolError | None]:
        """Fetch the current status of one submission."""
        with LogContext(operation="get_submission_status", submission_id=submission_id.id):
            return self.pipeline.execute(
                "GET",
                f"{SUBMISSIONS_ENDPOINT}/{submission_id.id}",
                SubmissionStatusResponse.from_metadata,
            )

    def get_previous_submissions(
        self,
    ) -> tuple[SubmissionListResponse | None, NotaryToolError | None]:
        """List the team's most recent submissions (up to 100)."""
        with LogContext(operation="get_previous_submissions"):
            return self.pipeline.execute(
                "GET", SUBMISSIONS_ENDPOINT, SubmissionListResponse.from_metadata
            )

    def poll_submission_status(
        self,
        submission_id: SubmissionId,
        max_poll_count: int,
        delay_function: DelayFunction,
        progress_callback: ProgressCallback | None = None,
    ) -> PollingOutcome:
        """
        Poll a submission until it is Accepted, Invalid or Rejected.

        A status-check error ends polling immediately (no retry).

        Args:
            submission_id: Submission to poll
            max_poll_count: Maximum number of status checks
            delay_function: Seconds to wait after attempt n (1-based)
            progress_callback: Called with (attempt, response) after each
                successful status check

        Returns:
            PollingOutcome (done, failed or timed out)
        """
        engine = PollingEngine(lambda: self.get_submission_status(submission_id))
        with LogContext(operation="poll_submission_status", submission_id=submission_id.id):
            return engine.poll(max_poll_count, delay_function, progress_callback)

    # =========================================================================
    # Submission Log
    # =========================================================================

    def get_submission_log(
        self, submission_id: SubmissionId
    ) -> tuple[SubmissionLogUrlResponse | None, NotaryToolError | None]:
        """Fetch the URL of a submission's developer log."""
        with LogContext(operation="get_submission_log", submission_id=submission_id.id):
            return self.pipeline.execute(
                "GET",
                f"{SUBMISSIONS_ENDPOINT}/{submission_id.id}/logs",
                SubmissionLogUrlResponse.from_metadata,
            )

    def retrieve_submission_log(
        self, submission_id: SubmissionId
    ) -> tuple[str | None, NotaryToolError | None]:
        """Fetch the developer log URL, then download the log (JSON text)."""
        log_url_response, error = self.get_submission_log(submission_id)
        if error is not None:
            return None, error

        url = log_url_response.developer_log_url_string
        with LogContext(operation="retrieve_submission_log", submission_id=submission_id.id):
            logger.info("Downloading submission log", extra={"url": url})
            return self.pipeline.fetch_submission_log(url)

    def download_submission_log(
        self, submission_id: SubmissionId, destination: Path | str
    ) -> tuple[Path | None, NotaryToolError | None]:
        """Download the developer log and write it to ``destination``."""
        log_text, error = self.retrieve_submission_log(submission_id)
        if error is not None:
            return None, error

        path = Path(destination)
        try:
            path.write_text(log_text, encoding="utf-8")
        except OSError as e:
            logger.warning(
                "Could not write submission log",
                extra={"submission_id": submission_id.id, "error_message": str(e)},
            )
            return None, SubmissionLogError(
                f"Error saving submission log to '{path}'", exception_msg=str(e), cause=e
            )
        return path, None


__all__ = [
    "NotaryToolClient",
    "calculate_sha256",
]
