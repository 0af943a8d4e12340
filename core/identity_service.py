"""
Identity service — registration, sign-in and profile operations.

Orchestrates the password hasher, the token issuer and the user store.
The service holds only immutable collaborators; every call works on its
own transient copy of the user record.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from auth.password import PasswordHasher
from auth.tokens import TokenIssuer
from core.exceptions import InvalidCredentialsError, NotFoundError
from database.user_store import UserStore
from utils.schemas import AuthResponse, User

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_limit(limit: int) -> int:
    """Clamp a caller-supplied page size into ``(0, 100]``, defaulting to 20."""
    if limit <= 0 or limit > MAX_LIST_LIMIT:
        return DEFAULT_LIST_LIMIT
    return limit


class IdentityService:
    def __init__(
        self,
        store: UserStore,
        tokens: TokenIssuer,
        hasher: PasswordHasher,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._hasher = hasher
        self._clock = clock

    async def register(self, name: str, email: str, password: str) -> AuthResponse:
        """
        Create an account and sign it in.

        ``ConflictError`` from the store propagates unchanged when the email
        is already registered.
        """
        password_hash = await asyncio.to_thread(self._hasher.hash, password)

        now = self._clock()
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        await self._store.create(user)

        token = self._tokens.issue(user.id, user.email, now=now)
        logger.info("Registered user %s", user.id)
        return AuthResponse(token=token, user=user)

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        """Unknown email and wrong password both raise ``InvalidCredentialsError``."""
        try:
            user = await self._store.get_by_email(email)
        except NotFoundError:
            raise InvalidCredentialsError() from None

        matches = await asyncio.to_thread(self._hasher.verify, password, user.password_hash)
        if not matches:
            raise InvalidCredentialsError()

        token = self._tokens.issue(user.id, user.email, now=self._clock())
        logger.info("Sign-in: %s", user.id)
        return AuthResponse(token=token, user=user)

    async def get_by_id(self, user_id: uuid.UUID) -> User:
        return await self._store.get_by_id(user_id)

    async def update_user(
        self,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """
        Apply a partial profile update.

        ``None`` and ``""`` both mean "leave unchanged", so a field can never
        be cleared through this call.  The ownership check (acting subject ==
        ``user_id``) is the caller's job.
        """
        user = await self._store.get_by_id(user_id)

        changes = {}
        if name:
            changes["name"] = name
        if email:
            changes["email"] = email
        # Never let updated_at move backwards if the wall clock does.
        changes["updated_at"] = max(self._clock(), user.updated_at)
        user = user.model_copy(update=changes)

        await self._store.update(user)
        logger.info("Updated user %s (%s)", user.id, ", ".join(sorted(changes)))
        return user

    async def list_users(self, email_filter: str = "", limit: int = 0, offset: int = 0) -> List[User]:
        # Offset is passed through as-is; negative values are up to the store.
        return await self._store.list(email_filter or "", normalize_limit(limit), offset)


__all__ = ["DEFAULT_LIST_LIMIT", "MAX_LIST_LIMIT", "IdentityService", "normalize_limit"]
