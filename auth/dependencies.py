"""
FastAPI dependencies for authentication.

Provides the authorization gate used by every protected route and the
``get_identity_service`` / ``get_current_user_id`` dependencies.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.tokens import TokenIssuer
from core.exceptions import InvalidTokenError
from core.identity_service import IdentityService

_bearer_scheme = HTTPBearer(auto_error=False)


class AuthorizationGate:
    """
    Claims-only bearer-token check.

    Every failure (missing, malformed, tampered, expired) raises the same
    ``InvalidTokenError``; the user store is never queried.
    """

    def __init__(self, tokens: TokenIssuer, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._tokens = tokens
        self._clock = clock

    def authenticate(self, credential: Optional[str]) -> uuid.UUID:
        """Return the subject id of a valid token."""
        if not credential:
            raise InvalidTokenError()
        now = self._clock() if self._clock else None
        return self._tokens.verify(credential, now=now).subject_id


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> uuid.UUID:
    """
    Extract and verify the Bearer token, returning the authenticated
    user id.  The id lives on ``request.state`` for this request only.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidTokenError()

    gate: AuthorizationGate = request.app.state.authorization_gate
    user_id = gate.authenticate(credentials.credentials)
    request.state.user_id = user_id
    return user_id
