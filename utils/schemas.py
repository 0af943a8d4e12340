"""
Pydantic schemas for the identity service.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError("email must be a valid email address")
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# Domain
# ═══════════════════════════════════════════════════════════════════════════════


class User(BaseModel):
    """
    A user account as held in memory for the duration of one request.

    ``password_hash`` is excluded from every dump, so it never reaches an
    API response or a log line built from ``model_dump()``.
    """

    id: uuid.UUID
    name: str
    email: str
    password_hash: str = Field(default="", exclude=True, repr=False)
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    token: str
    user: User


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2)
    email: str
    password: str = Field(..., min_length=8)

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        return _check_email(value)


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        return _check_email(value)


class UpdateUserRequest(BaseModel):
    """
    Partial profile update.

    An empty string means "leave unchanged", exactly like an absent field;
    a field can therefore never be cleared.
    """

    name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name_length(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) < 2:
            raise ValueError("name must be at least 2 characters")
        return value

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: Optional[str]) -> Optional[str]:
        if value:
            _check_email(value)
        return value

    def is_empty(self) -> bool:
        return not self.name and not self.email


# ═══════════════════════════════════════════════════════════════════════════════
# Envelopes
# ═══════════════════════════════════════════════════════════════════════════════


class UserEnvelope(BaseModel):
    data: User


class UserListEnvelope(BaseModel):
    data: List[User] = Field(default_factory=list)


class AuthEnvelope(BaseModel):
    data: AuthResponse
