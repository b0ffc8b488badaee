"""
Bearer token authentication.

Provides ES256 signing of App Store Connect API tokens and the TokenManager
that caches a token for its lifetime and regenerates it on expiry.
"""

from notarytool.auth.jwt import load_private_key, load_private_key_pem, sign_es256
from notarytool.auth.models import SignedToken
from notarytool.auth.token_manager import (
    DEFAULT_TOKEN_LIFETIME,
    MAX_TOKEN_LIFETIME,
    TokenManager,
)

__all__ = [
    "TokenManager",
    "SignedToken",
    "DEFAULT_TOKEN_LIFETIME",
    "MAX_TOKEN_LIFETIME",
    "load_private_key",
    "load_private_key_pem",
    "sign_es256",
]
