"""
Error taxonomy for the identity service.

Every error carries a stable ``code`` (safe to hand to API callers) and a
human-readable ``message``.  Internal failures share the ``internal_error``
code so that no store or crypto detail leaks past the HTTP boundary.
"""

from __future__ import annotations

from typing import Optional


class IdentityError(Exception):
    """Base class for all identity-service failures."""

    code: str = "internal_error"
    message: str = "internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFoundError(IdentityError):
    code = "not_found"
    message = "user not found"


class ConflictError(IdentityError):
    code = "conflict"
    message = "email already in use"


class InvalidCredentialsError(IdentityError):
    """Wrong password or unknown email; the two are never distinguished."""

    code = "invalid_credentials"
    message = "email or password is incorrect"


class InvalidTokenError(IdentityError):
    """Malformed, tampered, expired or wrongly-signed session token."""

    code = "unauthorized"
    message = "invalid or expired token"


class InternalError(IdentityError):
    """Failure that is not attributable to the caller.

    ``detail`` is meant for logs only; ``message`` stays generic.
    """

    def __init__(self, detail: str = "") -> None:
        super().__init__()
        self.detail = detail

    def __str__(self) -> str:
        return self.detail or self.message


class EncodingError(InternalError):
    pass


class SigningError(InternalError):
    pass


class StoreError(InternalError):
    pass


__all__ = [
    "IdentityError",
    "NotFoundError",
    "ConflictError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "InternalError",
    "EncodingError",
    "SigningError",
    "StoreError",
]
