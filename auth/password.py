"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  Hashing is CPU-bound, so both
operations run in a worker thread and are awaited by the caller.
"""

from __future__ import annotations

import asyncio
import secrets

import bcrypt

# bcrypt silently ignores (or, in newer releases, rejects) input past this.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash_sync(self, password: str) -> str:
        """Hash a password with bcrypt (fresh salt embedded in the digest)."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode(), salt).decode()

    def verify_sync(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        try:
            raw = password.encode()
            # Registration never accepts these, so they can never match.
            if len(raw) > MAX_PASSWORD_BYTES:
                return False
            return bcrypt.checkpw(raw, password_hash.encode())
        except (ValueError, TypeError, AttributeError):
            return False

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify_sync, password, password_hash)

    async def verify_unknown_user(self, password: str) -> bool:
        """Spend a real bcrypt check when no stored hash exists; always False."""
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash(secrets.token_urlsafe(16))
        await self.verify(password, self._dummy_hash)
        return False
