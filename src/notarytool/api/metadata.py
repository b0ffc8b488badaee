"""
Snapshot of a completed HTTP exchange.

The body of a ``requests.Response`` is read exactly once, here, and the
response is closed by the caller's ``with`` block. Everything downstream
(classification, model building, error values) works from this snapshot.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from types import MappingProxyType
from typing import Mapping

import requests


@dataclass(frozen=True)
class ResponseMetadata:
    """
    Immutable view of one HTTP response.

    Attributes:
        status_code: HTTP status code
        status_message: HTTP reason phrase (may be empty)
        request_url: URL of the request that produced this response
        headers: Response headers (read-only, lower-cased keys)
        content_type: Content-Type header, or None
        content_length: Content-Length header as int, or None if absent
        raw_contents: Body text, or None when the response had no body (not in repr)
        received_timestamp: When the response was captured (UTC)
    """

    status_code: int
    status_message: str
    request_url: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    content_type: str | None = None
    content_length: int | None = None
    raw_contents: str | None = field(default=None, repr=False)
    received_timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_response(
        cls,
        response: requests.Response,
        received_timestamp: datetime | None = None,
    ) -> "ResponseMetadata":
        """Capture status, headers and body text from a response."""
        headers = {key.lower(): value for key, value in response.headers.items()}

        content_length = None
        raw_length = headers.get("content-length")
        if raw_length is not None:
            try:
                content_length = int(raw_length)
            except ValueError:
                content_length = None

        raw_contents = response.text if response.content else None

        return cls(
            status_code=response.status_code,
            status_message=response.reason or "",
            request_url=str(response.url or ""),
            headers=MappingProxyType(headers),
            content_type=headers.get("content-type"),
            content_length=content_length,
            raw_contents=raw_contents,
            received_timestamp=received_timestamp or datetime.now(UTC),
        )

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def status_string(self) -> str:
        return f"{self.status_code} - {self.status_message}"

    @property
    def header_date(self) -> datetime | None:
        """Value of the ``Date`` header, or None if absent or unparseable."""
        value = self.header("date")
        if not value:
            return None
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def __str__(self) -> str:
        return f"{self.status_string}; content-type: '{self.content_type}'"


__all__ = ["ResponseMetadata"]
