"""Signed token model."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from notarytool.auth.jwt import decode_segment


@dataclass(frozen=True)
class SignedToken:
    """
    A signed bearer token and its validity window.

    Attributes:
        encoded: Compact JWT string sent in the Authorization header
        issued_at: UTC instant the token was issued (``iat``)
        expiration: UTC instant the token expires (``exp``)
    """

    encoded: str
    issued_at: datetime
    expiration: datetime

    def is_expired(self, now: datetime) -> bool:
        """Expired once ``now`` reaches the expiration instant."""
        return now >= self.expiration

    def remaining_lifetime(self, now: datetime) -> timedelta:
        return self.expiration - now

    @property
    def decoded_header(self) -> dict[str, Any]:
        return decode_segment(self.encoded, 0)

    @property
    def decoded_payload(self) -> dict[str, Any]:
        return decode_segment(self.encoded, 1)

    def __repr__(self) -> str:
        # Keep the credential itself out of logs and tracebacks
        return (
            f"SignedToken(issued_at={self.issued_at.isoformat()}, "
            f"expiration={self.expiration.isoformat()})"
        )


__all__ = ["SignedToken"]
