"""Bearer token lifecycle: creation, expiry check and lazy refresh."""

import logging
import threading
from datetime import UTC, datetime, timedelta
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec

from notarytool.api.schemas import JwtHeaderJson, JwtPayloadJson
from notarytool.auth.jwt import load_private_key, load_private_key_pem, sign_es256
from notarytool.auth.models import SignedToken
from notarytool.errors.exceptions import JsonWebTokenError, TokenCreationError
from notarytool.types import Clock

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(minutes=15)

# App Store Connect rejects tokens valid for longer than 20 minutes
MAX_TOKEN_LIFETIME = timedelta(minutes=20)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TokenManager:
    """
    Owns the signed bearer token for one client.

    The token is created eagerly by ``create()`` and regenerated by
    ``current_token()`` once its expiration instant has been reached.
    Regeneration replaces the cached SignedToken; nothing else changes.

    Usage:
        manager, error = TokenManager.create(
            key_id="ABC123DEFG",
            issuer_id="69a6de7e-...",
            private_key_file=Path("AuthKey_ABC123DEFG.p8"),
        )
        if error:
            ...
        token, error = manager.current_token()
        headers = {"Authorization": f"Bearer {token.encoded}"}
    """

    def __init__(
        self,
        key_id: str,
        issuer_id: str,
        private_key: ec.EllipticCurvePrivateKey,
        lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Clock | None = None,
    ):
        self.key_id = key_id
        self.issuer_id = issuer_id
        self.lifetime = lifetime
        self._private_key = private_key
        self._clock = clock or _utc_now
        self._token: SignedToken | None = None
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        key_id: str,
        issuer_id: str,
        private_key_file: Path | str | None = None,
        *,
        private_key_pem: bytes | str | None = None,
        lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Clock | None = None,
    ) -> tuple["TokenManager | None", JsonWebTokenError | None]:
        """
        Load the private key and sign the first token.

        Exactly one key source is used: ``private_key_pem`` when given,
        otherwise ``private_key_file``.

        Returns:
            Tuple of (TokenManager or None, JsonWebTokenError or None).
            PrivateKeyNotFoundError when no key source exists,
            InvalidPrivateKeyError when the key cannot be decoded,
            TokenCreationError for any other signing failure.
        """
        if private_key_pem is not None:
            private_key, error = load_private_key_pem(private_key_pem)
        else:
            private_key, error = load_private_key(private_key_file)
        if error is not None:
            return None, error

        if not key_id or not issuer_id:
            return None, TokenCreationError("key id and issuer id must not be empty")
        if not timedelta(seconds=1) <= lifetime <= MAX_TOKEN_LIFETIME:
            return None, TokenCreationError(
                f"token lifetime must be between 1 and "
                f"{int(MAX_TOKEN_LIFETIME.total_seconds())} seconds, "
                f"got {lifetime.total_seconds()}"
            )

        manager = cls(key_id, issuer_id, private_key, lifetime=lifetime, clock=clock)
        _, error = manager.current_token()
        if error is not None:
            return None, error
        return manager, None

    def current_token(self) -> tuple[SignedToken | None, TokenCreationError | None]:
        """
        Return the cached token, regenerating it first if it has expired.

        Returns:
            Tuple of (SignedToken or None, TokenCreationError or None)
        """
        with self._lock:
            now = self._clock()
            if self._token is not None and not self._token.is_expired(now):
                return self._token, None

            token, error = self._sign(now)
            if error is not None:
                return None, error

            self._token = token
            logger.debug(
                "Generated new bearer token, valid until %s",
                token.expiration.isoformat(),
                extra={"key_id": self.key_id},
            )
            return token, None

    def get_cached_token(self) -> SignedToken | None:
        """Cached token without any expiry check (None before first use)."""
        return self._token

    def clear_token(self) -> None:
        """Drop the cached token so the next call regenerates it."""
        with self._lock:
            self._token = None

    def _sign(self, now: datetime) -> tuple[SignedToken | None, TokenCreationError | None]:
        issued_at = now.astimezone(UTC).replace(microsecond=0)
        expiration = issued_at + timedelta(seconds=int(self.lifetime.total_seconds()))

        header = JwtHeaderJson(kid=self.key_id)
        payload = JwtPayloadJson(
            iss=self.issuer_id,
            iat=int(issued_at.timestamp()),
            exp=int(expiration.timestamp()),
        )

        try:
            encoded = sign_es256(header.model_dump(), payload.model_dump(), self._private_key)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            logger.warning(
                "Failed to sign bearer token",
                extra={"key_id": self.key_id, "error_message": str(e)},
            )
            return None, TokenCreationError(str(e), cause=e)

        return SignedToken(encoded=encoded, issued_at=issued_at, expiration=expiration), None


__all__ = [
    "DEFAULT_TOKEN_LIFETIME",
    "MAX_TOKEN_LIFETIME",
    "TokenManager",
]
