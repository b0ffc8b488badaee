"""
Response envelopes and the builders that fill them.

Each envelope carries the domain payload plus the ResponseMetadata and the
instant the response was received. Builders decode the captured body with
the matching wire schema and return ``(envelope, None)`` or
``(None, JsonParseError)``. Fields that are present but malformed (a date
that is not ISO-8601, a log URL that does not parse) degrade to None with
the raw text preserved; they never fail the build.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import SplitResult, urlsplit

from notarytool.api.metadata import ResponseMetadata
from notarytool.api.models import SubmissionId, SubmissionInfo
from notarytool.api.schemas import (
    ErrorResponseJson,
    NewSubmissionResponseJson,
    SubmissionDataJson,
    SubmissionListResponseJson,
    SubmissionLogUrlResponseJson,
    SubmissionResponseJson,
    parse_json,
)
from notarytool.errors.exceptions import JsonParseError

logger = logging.getLogger(__name__)


def _submission_id(
    raw_id: str, metadata: ResponseMetadata
) -> tuple[SubmissionId | None, JsonParseError | None]:
    submission_id, error = SubmissionId.of(raw_id)
    if error is not None:
        return None, JsonParseError(
            f"Response contains a malformed submission id: '{raw_id}'",
            metadata.raw_contents,
        )
    return submission_id, None


def _submission_info(
    data: SubmissionDataJson, metadata: ResponseMetadata
) -> tuple[SubmissionInfo | None, JsonParseError | None]:
    submission_id, error = _submission_id(data.id, metadata)
    if error is not None:
        return None, error
    return (
        SubmissionInfo.build(
            submission_id=submission_id,
            name=data.attributes.name,
            status_text=data.attributes.status,
            created_date_text=data.attributes.created_date,
        ),
        None,
    )


def parse_http_url(url_string: str | None) -> SplitResult | None:
    """Split an absolute http(s) URL, or return None if it is not one."""
    if not url_string:
        return None
    try:
        parts = urlsplit(url_string.strip())
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return parts


@dataclass(frozen=True)
class NotaryApiResponse:
    """Common envelope fields. The metadata holds the raw body, so it stays out of repr."""

    response_metadata: ResponseMetadata = field(repr=False)

    @property
    def received_timestamp(self) -> datetime:
        return self.response_metadata.received_timestamp


@dataclass(frozen=True)
class SubmissionStatusResponse(NotaryApiResponse):
    """Response of ``GET submissions/{id}``."""

    submission_info: SubmissionInfo

    @classmethod
    def from_metadata(
        cls, metadata: ResponseMetadata
    ) -> tuple["SubmissionStatusResponse | None", JsonParseError | None]:
        wire, error = parse_json(SubmissionResponseJson, metadata.raw_contents)
        if error is not None:
            return None, error

        info, error = _submission_info(wire.data, metadata)
        if error is not None:
            return None, error
        return cls(response_metadata=metadata, submission_info=info), None


@dataclass(frozen=True)
class SubmissionListResponse(NotaryApiResponse):
    """Response of ``GET submissions``, most recent submissions first."""

    submission_info_list: tuple[SubmissionInfo, ...] = ()

    @classmethod
    def from_metadata(
        cls, metadata: ResponseMetadata
    ) -> tuple["SubmissionListResponse | None", JsonParseError | None]:
        wire, error = parse_json(SubmissionListResponseJson, metadata.raw_contents)
        if error is not None:
            return None, error

        infos = []
        for data in wire.data:
            info, error = _submission_info(data, metadata)
            if error is not None:
                return None, error
            infos.append(info)

        return cls(response_metadata=metadata, submission_info_list=tuple(infos)), None


@dataclass(frozen=True)
class SubmissionLogUrlResponse(NotaryApiResponse):
    """
    Response of ``GET submissions/{id}/logs``.

    ``developer_log_url`` is None when ``developer_log_url_string`` is not
    an absolute http(s) URL.
    """

    submission_id: SubmissionId
    developer_log_url_string: str
    developer_log_url: SplitResult | None = None

    @classmethod
    def from_metadata(
        cls, metadata: ResponseMetadata
    ) -> tuple["SubmissionLogUrlResponse | None", JsonParseError | None]:
        wire, error = parse_json(SubmissionLogUrlResponseJson, metadata.raw_contents)
        if error is not None:
            return None, error

        submission_id, error = _submission_id(wire.data.id, metadata)
        if error is not None:
            return None, error

        url_string = wire.data.attributes.developer_log_url
        url = parse_http_url(url_string)
        if url is None:
            logger.warning(
                "Developer log URL could not be parsed",
                extra={"submission_id": submission_id.id, "url": url_string},
            )

        return (
            cls(
                response_metadata=metadata,
                submission_id=submission_id,
                developer_log_url_string=url_string,
                developer_log_url=url,
            ),
            None,
        )


@dataclass(frozen=True)
class NewSubmissionResponse(NotaryApiResponse):
    """
    Response of ``POST submissions``.

    Holds the new submission's id and the temporary credentials for
    uploading the software to ``s3://<bucket>/<object_key>``.
    """

    id: SubmissionId
    aws_access_key_id: str
    aws_secret_access_key: str = field(repr=False)
    aws_session_token: str = field(repr=False)
    bucket: str
    object_key: str

    @classmethod
    def from_metadata(
        cls, metadata: ResponseMetadata
    ) -> tuple["NewSubmissionResponse | None", JsonParseError | None]:
        wire, error = parse_json(NewSubmissionResponseJson, metadata.raw_contents)
        if error is not None:
            return None, error

        submission_id, error = _submission_id(wire.data.id, metadata)
        if error is not None:
            return None, error

        attributes = wire.data.attributes
        return (
            cls(
                response_metadata=metadata,
                id=submission_id,
                aws_access_key_id=attributes.aws_access_key_id,
                aws_secret_access_key=attributes.aws_secret_access_key,
                aws_session_token=attributes.aws_session_token,
                bucket=attributes.bucket,
                object_key=attributes.object_key,
            ),
            None,
        )


@dataclass(frozen=True)
class ErrorInfo:
    """One entry of a vendor error response."""

    id: str
    status_string: str
    code: str
    title: str
    detail: str

    @property
    def status(self) -> int | None:
        try:
            return int(self.status_string)
        except ValueError:
            return None


def parse_error_response(
    json_string: str | None,
) -> tuple[list[ErrorInfo] | None, JsonParseError | None]:
    """Decode a vendor ``{"errors": [...]}`` body."""
    wire, error = parse_json(ErrorResponseJson, json_string)
    if error is not None:
        return None, error
    return [
        ErrorInfo(
            id=e.id,
            status_string=e.status,
            code=e.code,
            title=e.title,
            detail=e.detail,
        )
        for e in wire.errors
    ], None


__all__ = [
    "NotaryApiResponse",
    "SubmissionStatusResponse",
    "SubmissionListResponse",
    "SubmissionLogUrlResponse",
    "NewSubmissionResponse",
    "ErrorInfo",
    "parse_error_response",
    "parse_http_url",
]
