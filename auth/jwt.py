"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON claims signed with HMAC-SHA256::

    <base64url(claims)>.<hex signature>

The secret is passed in by the caller (``Settings.jwt_secret``, env var
``JWT_SECRET``); nothing here has a default key.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Callable

from pydantic import BaseModel, ValidationError

from auth.exceptions import InvalidToken, TokenExpired

DEFAULT_EXPIRY_SECONDS = 30 * 86400


class TokenClaims(BaseModel):
    """Decoded token payload."""

    sub: str
    iat: int
    exp: int


class TokenIssuer:
    """Mints and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret.encode()
        self._expiry_seconds = expiry_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, subject: str) -> str:
        """Create a signed token for ``subject``."""
        now = int(self._clock())
        claims = TokenClaims(sub=subject, iat=now, exp=now + self._expiry_seconds)
        raw = json.dumps(claims.model_dump(), separators=(",", ":")).encode()
        body = urlsafe_b64encode(raw).rstrip(b"=").decode()
        return body + "." + self._sign(raw)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature, then expiry, and return the claims.

        Raises ``InvalidToken`` for anything malformed or tampered with and
        ``TokenExpired`` once ``exp`` has passed.
        """
        try:
            body, sig = token.split(".")
            raw = urlsafe_b64decode(body + "=" * (-len(body) % 4))
        except (ValueError, AttributeError) as exc:
            raise InvalidToken("bad format") from exc

        if not hmac.compare_digest(sig.encode(), self._sign(raw).encode()):
            raise InvalidToken("bad signature")

        try:
            claims = TokenClaims.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            raise InvalidToken("bad claims") from exc

        if claims.exp <= self._clock():
            raise TokenExpired("token expired")
        return claims
