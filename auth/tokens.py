"""
Session token issuing and verification.

Tokens are JWTs signed with HMAC-SHA256 under a single symmetric secret.
They carry the subject id, subject email, issued-at and expiry; nothing is
stored server-side, so validity is re-derived on every verification.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from core.exceptions import InvalidTokenError, SigningError

SIGNING_ALGORITHM = "HS256"
# Tokens whose header names anything else (``none``, RS256, ...) are
# rejected before any key is applied.
ACCEPTED_ALGORITHMS = ("HS256", "HS384", "HS512")


@dataclass(frozen=True)
class TokenClaims:
    subject_id: uuid.UUID
    email: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_datetime(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class TokenIssuer:
    """Issue and verify signed session tokens."""

    def __init__(self, secret: str, ttl: timedelta) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(
        self,
        subject_id: uuid.UUID,
        subject_email: str,
        now: Optional[datetime] = None,
        ttl: Optional[timedelta] = None,
    ) -> str:
        """Create a signed token valid for ``[now, now + ttl)``."""
        now = now or _utcnow()
        ttl = self._ttl if ttl is None else ttl
        issued_at = now.timestamp()
        payload = {
            "sub": str(subject_id),
            "email": subject_email,
            "iat": issued_at,
            "exp": issued_at + ttl.total_seconds(),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=SIGNING_ALGORITHM)
        except Exception as exc:
            raise SigningError(f"token signing failed: {type(exc).__name__}") from exc

    def verify(self, token: str, now: Optional[datetime] = None) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``InvalidTokenError`` for a bad signature, an unexpected
        algorithm, an expired token or a malformed subject.  The store is
        never consulted.
        """
        now = now or _utcnow()
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") not in ACCEPTED_ALGORITHMS:
                raise InvalidTokenError()
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=list(ACCEPTED_ALGORITHMS),
                # Time claims are checked below against the caller's clock.
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "email", "iat", "exp"],
                },
            )
            expires_at = float(payload["exp"])
            issued_at = float(payload["iat"])
            subject_id = uuid.UUID(str(payload["sub"]))
            email = payload["email"]
        except InvalidTokenError:
            raise
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            raise InvalidTokenError() from exc

        if not isinstance(email, str):
            raise InvalidTokenError()
        if now.timestamp() >= expires_at:
            raise InvalidTokenError()

        return TokenClaims(
            subject_id=subject_id,
            email=email,
            issued_at=_to_datetime(issued_at),
            expires_at=_to_datetime(expires_at),
        )


__all__ = ["ACCEPTED_ALGORITHMS", "SIGNING_ALGORITHM", "TokenClaims", "TokenIssuer"]
