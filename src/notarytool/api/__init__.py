"""
Notary API data layer.

Provides:
- Wire schemas (pydantic) for request and response bodies
- Domain records: SubmissionId, Status, SubmissionInfo
- ResponseMetadata snapshot of each HTTP exchange
- Response envelopes and their builders

The request pipeline lives in ``notarytool.api.pipeline``.
"""

from notarytool.api.metadata import ResponseMetadata
from notarytool.api.models import Status, SubmissionId, SubmissionInfo
from notarytool.api.responses import (
    ErrorInfo,
    NewSubmissionResponse,
    NotaryApiResponse,
    SubmissionListResponse,
    SubmissionLogUrlResponse,
    SubmissionStatusResponse,
)
from notarytool.api.schemas import Notification

__all__ = [
    # Models
    "SubmissionId",
    "Status",
    "SubmissionInfo",
    "ResponseMetadata",
    # Responses
    "NotaryApiResponse",
    "SubmissionStatusResponse",
    "SubmissionListResponse",
    "SubmissionLogUrlResponse",
    "NewSubmissionResponse",
    "ErrorInfo",
    # Requests
    "Notification",
]
