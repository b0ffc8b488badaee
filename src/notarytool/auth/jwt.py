"""
ES256 JSON Web Token signing.

Loads the App Store Connect API key (a PKCS#8 PEM ``.p8`` file holding a
P-256 private key) and produces compact three-segment tokens:

    base64url(header) . base64url(payload) . base64url(r || s)

The ECDSA signature is converted from the DER encoding ``cryptography``
produces to the fixed-width raw form JWS requires.
"""

import base64
import json
import logging
from pathlib import Path
from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from notarytool.errors.exceptions import (
    InvalidPrivateKeyError,
    JsonWebTokenError,
    PrivateKeyNotFoundError,
)

logger = logging.getLogger(__name__)

# P-256 coordinates are 32 bytes each
ES256_COORDINATE_SIZE = 32


def base64url_encode(data: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(segment: str) -> bytes:
    """Decode URL-safe base64, restoring any stripped padding."""
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode((segment + padding).encode("ascii"))


def load_private_key_pem(
    pem: bytes | str,
) -> tuple[ec.EllipticCurvePrivateKey | None, InvalidPrivateKeyError | None]:
    """
    Decode PEM key material into an EC private key.

    Returns:
        Tuple of (private key or None, InvalidPrivateKeyError or None)
    """
    data = pem.encode("utf-8") if isinstance(pem, str) else pem
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        return None, InvalidPrivateKeyError(str(e), cause=e)

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        return None, InvalidPrivateKeyError(
            f"Expected an EC private key, got {type(key).__name__}"
        )
    return key, None


def load_private_key(
    path: Path | str | None,
) -> tuple[ec.EllipticCurvePrivateKey | None, JsonWebTokenError | None]:
    """
    Read and decode a ``.p8`` private key file.

    Returns:
        Tuple of (private key or None, PrivateKeyNotFoundError /
        InvalidPrivateKeyError or None)
    """
    if path is None:
        return None, PrivateKeyNotFoundError("<none>")

    key_path = Path(path)
    if not key_path.is_file():
        return None, PrivateKeyNotFoundError(str(key_path))

    try:
        pem = key_path.read_bytes()
    except OSError as e:
        return None, PrivateKeyNotFoundError(str(key_path), cause=e)

    key, error = load_private_key_pem(pem)
    if error is not None:
        logger.warning(
            "Could not decode private key",
            extra={"private_key_file": str(key_path), "error_message": error.exception_msg},
        )
    return key, error


def _encode_segment(claims: dict[str, Any]) -> str:
    return base64url_encode(
        json.dumps(claims, separators=(",", ":")).encode("utf-8")
    )


def sign_es256(
    header: dict[str, Any],
    payload: dict[str, Any],
    private_key: ec.EllipticCurvePrivateKey,
) -> str:
    """
    Sign header and payload claims with ES256.

    Raises:
        ValueError: If the key is not on the P-256 curve
        TypeError: If claims are not JSON serializable
    """
    if not isinstance(private_key.curve, ec.SECP256R1):
        raise ValueError(
            f"ES256 requires a P-256 key, got curve {private_key.curve.name}"
        )

    signing_input = f"{_encode_segment(header)}.{_encode_segment(payload)}"
    der_signature = private_key.sign(
        signing_input.encode("ascii"), ec.ECDSA(hashes.SHA256())
    )
    r, s = decode_dss_signature(der_signature)
    raw_signature = r.to_bytes(ES256_COORDINATE_SIZE, "big") + s.to_bytes(
        ES256_COORDINATE_SIZE, "big"
    )
    return f"{signing_input}.{base64url_encode(raw_signature)}"


def decode_segment(token: str, index: int) -> dict[str, Any]:
    """
    Decode the header (0) or payload (1) segment of a compact token.

    Raises:
        ValueError: If the token does not have three segments or the segment
            is not a base64url JSON object
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise ValueError(f"Expected 3 token segments, got {len(segments)}")
    decoded = json.loads(base64url_decode(segments[index]))
    if not isinstance(decoded, dict):
        raise ValueError("Token segment is not a JSON object")
    return decoded


__all__ = [
    "ES256_COORDINATE_SIZE",
    "base64url_encode",
    "base64url_decode",
    "load_private_key",
    "load_private_key_pem",
    "sign_es256",
    "decode_segment",
]
