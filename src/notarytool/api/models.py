"""
Domain records built from Notary API responses.

SubmissionId is the validated submission identifier, Status the closed set
of submission states, and SubmissionInfo the per-submission record shared by
the status and list responses.
"""

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from notarytool.errors.exceptions import MalformedSubmissionIdError

logger = logging.getLogger(__name__)

SUBMISSION_ID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
)


@dataclass(frozen=True)
class SubmissionId:
    """
    Identifier the notary service returns when a submission is started.

    Use ``SubmissionId.of()`` for strings from outside the library; direct
    construction raises ValueError on a malformed value.
    """

    id: str

    def __post_init__(self):
        if not SUBMISSION_ID_PATTERN.fullmatch(self.id):
            raise ValueError(f"Malformed submission id: '{self.id}'")

    @classmethod
    def of(
        cls, value: str
    ) -> tuple["SubmissionId | None", MalformedSubmissionIdError | None]:
        """
        Validate and wrap a submission id string.

        Returns:
            Tuple of (SubmissionId or None, MalformedSubmissionIdError or None)
        """
        if not isinstance(value, str) or not SUBMISSION_ID_PATTERN.fullmatch(value):
            return None, MalformedSubmissionIdError(str(value))
        return cls(value), None

    def __str__(self) -> str:
        return self.id


class Status(Enum):
    """Status of a submission as reported by the notary service."""

    ACCEPTED = "Accepted"
    IN_PROGRESS = "In Progress"
    INVALID = "Invalid"
    REJECTED = "Rejected"
    UNKNOWN = "Unknown"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    @classmethod
    def from_string(cls, text: str | None) -> "Status":
        """
        Map status text to a Status, case-insensitively.

        "In-Progress" is accepted as a synonym for "In Progress". Anything
        unrecognized maps to UNKNOWN.
        """
        if text is None:
            return cls.UNKNOWN
        normalized = text.lower()
        if normalized == "in-progress":
            normalized = "in progress"
        for status in cls:
            if status is not cls.UNKNOWN and status.value.lower() == normalized:
                return status
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


_TERMINAL_STATUSES = frozenset({Status.ACCEPTED, Status.INVALID, Status.REJECTED})


def parse_instant(text: str | None) -> datetime | None:
    """
    Parse an ISO-8601 instant (e.g. ``2022-06-08T01:38:09.498Z``) as UTC.

    Returns None when the text is missing, malformed, or carries no offset.
    """
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed.astimezone(UTC)


@dataclass(frozen=True)
class SubmissionInfo:
    """
    Information about the status of a submission.

    Attributes:
        id: Unique identifier for the submission
        name: Submission name given when the submission was started
        status: Parsed status (UNKNOWN for unrecognized text)
        status_text: Status exactly as returned by the service
        created_date: When the submission started, or None if
            ``created_date_text`` could not be parsed
        created_date_text: Creation date exactly as returned by the service
    """

    id: SubmissionId
    name: str
    status: Status
    status_text: str
    created_date: datetime | None
    created_date_text: str

    @classmethod
    def build(
        cls,
        submission_id: SubmissionId,
        name: str,
        status_text: str,
        created_date_text: str,
    ) -> "SubmissionInfo":
        """Build from raw attribute text. Never fails on bad date or status text."""
        created_date = parse_instant(created_date_text)
        if created_date is None:
            logger.warning(
                "Could not parse submission createdDate",
                extra={
                    "submission_id": submission_id.id,
                    "created_date_text": created_date_text,
                },
            )

        status = Status.from_string(status_text)
        if status is Status.UNKNOWN:
            logger.debug(
                "Unrecognized submission status",
                extra={"submission_id": submission_id.id, "status_text": status_text},
            )

        return cls(
            id=submission_id,
            name=name,
            status=status,
            status_text=status_text,
            created_date=created_date,
            created_date_text=created_date_text,
        )


__all__ = [
    "SUBMISSION_ID_PATTERN",
    "SubmissionId",
    "Status",
    "SubmissionInfo",
    "parse_instant",
]
