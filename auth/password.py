"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic salting and a
configurable work factor.  The plaintext is reduced to a fixed-length
SHA-256 digest first, so passwords longer than bcrypt's 72-byte limit
(or containing NUL bytes) hash without error and without truncation.
"""

from __future__ import annotations

import base64
import hashlib

import bcrypt

from core.exceptions import EncodingError

DEFAULT_ROUNDS = 12


def _prehash(password: str) -> bytes:
    digest = hashlib.sha256(password.encode("utf-8", "surrogatepass")).digest()
    return base64.b64encode(digest)


class PasswordHasher:
    """One-way credential codec; plaintext is never retained."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt (auto-salted)."""
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            return bcrypt.hashpw(_prehash(password), salt).decode("ascii")
        except Exception as exc:
            raise EncodingError(f"password hashing failed: {type(exc).__name__}") from exc

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        try:
            return bcrypt.checkpw(_prehash(password), password_hash.encode("ascii"))
        except (ValueError, TypeError):
            return False


__all__ = ["DEFAULT_ROUNDS", "PasswordHasher"]
