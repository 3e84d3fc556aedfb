"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    <base64url(payload)>.<hex signature>

The secret comes from ``Settings.jwt_secret`` (env var: ``JWT_SECRET``).
Tokens are not stored anywhere; logging out means the client drops it.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode

from core.errors import ExpiredTokenError, InvalidTokenError


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(data: str) -> bytes:
    return urlsafe_b64decode(data + "=" * (-len(data) % 4))


class TokenService:
    def __init__(self, secret: str, expiry_seconds: int = 604800) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: str, now: float | None = None) -> str:
        """Create a signed token containing ``user_id`` and expiry."""
        issued_at = int(time.time() if now is None else now)
        payload = {
            "user_id": user_id,
            "iat": issued_at,
            "exp": issued_at + self.expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return _b64encode(raw) + "." + self._sign(raw)

    def verify(self, token: str, now: float | None = None) -> str:
        """
        Verify token and return ``user_id``.

        Raises ``InvalidTokenError`` for anything malformed or forged and
        ``ExpiredTokenError`` for a genuine token past its ``exp``.
        """
        if not isinstance(token, str):
            raise InvalidTokenError()
        parts = token.split(".")
        if len(parts) != 2:
            raise InvalidTokenError()
        try:
            raw = _b64decode(parts[0])
        except (binascii.Error, ValueError):
            raise InvalidTokenError() from None

        if not hmac.compare_digest(parts[1].encode(), self._sign(raw).encode()):
            raise InvalidTokenError()

        try:
            payload = json.loads(raw)
        except (UnicodeDecodeError, ValueError):
            raise InvalidTokenError() from None
        if not isinstance(payload, dict):
            raise InvalidTokenError()
        user_id = payload.get("user_id")
        exp = payload.get("exp")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError()
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise InvalidTokenError()

        current = time.time() if now is None else now
        if current >= exp:
            raise ExpiredTokenError()
        return user_id
