"""
User store — persistence of user records.

Every operation opens its own session and, for writes, a single
transaction: the write either commits as a whole or is rolled back
(including when the calling task is cancelled or times out).  Email
uniqueness is enforced by the unique index and surfaced as
``ConflictError`` at write time; callers never check-then-insert.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import ConflictError, NotFoundError, StoreError
from database.models import UserRecord
from utils.schemas import User

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# SQLite extended result codes and PostgreSQL SQLSTATE for unique violations.
_SQLITE_UNIQUE_ERRORS = {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
_SQLITE_UNIQUE_CODES = {2067, 1555}
_PG_UNIQUE_VIOLATION = "23505"


def _serialize_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def _parse_datetime(value: str) -> datetime:
    # Accepts both our fixed-width format and plain RFC 3339 seconds.
    return datetime.fromisoformat(value).astimezone(timezone.utc)


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Classify a constraint failure by the driver's structured error code."""
    orig = exc.orig
    if getattr(orig, "sqlite_errorname", None) in _SQLITE_UNIQUE_ERRORS:
        return True
    if getattr(orig, "sqlite_errorcode", None) in _SQLITE_UNIQUE_CODES:
        return True
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate == _PG_UNIQUE_VIOLATION


def _to_user(row: UserRecord) -> User:
    return User(
        id=uuid.UUID(row.id),
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        created_at=_parse_datetime(row.created_at),
        updated_at=_parse_datetime(row.updated_at),
    )


class UserStore:
    """Async repository for ``users`` rows."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, user: User) -> None:
        """Persist a new user; ``ConflictError`` if the email is taken."""
        record = UserRecord(
            id=str(user.id),
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            created_at=_serialize_datetime(user.created_at),
            updated_at=_serialize_datetime(user.updated_at),
        )
        try:
            async with self._session_factory() as session, session.begin():
                session.add(record)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise ConflictError() from exc
            raise StoreError(f"repository.create: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"repository.create: {exc}") from exc

    async def get_by_id(self, user_id: uuid.UUID) -> User:
        return await self._get_one(UserRecord.id == str(user_id), "repository.get_by_id")

    async def get_by_email(self, email: str) -> User:
        """Exact-match lookup; used by sign-in only."""
        return await self._get_one(UserRecord.email == email, "repository.get_by_email")

    async def update(self, user: User) -> None:
        """
        Write name, email and updated-at for an existing id.

        ``ConflictError`` on an email collision, ``NotFoundError`` when no
        row has this id.
        """
        stmt = (
            update(UserRecord)
            .where(UserRecord.id == str(user.id))
            .values(
                name=user.name,
                email=user.email,
                updated_at=_serialize_datetime(user.updated_at),
            )
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                affected = result.rowcount
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise ConflictError() from exc
            raise StoreError(f"repository.update: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"repository.update: {exc}") from exc

        if affected == 0:
            raise NotFoundError()

    async def list(self, email_filter: str, limit: int, offset: int) -> List[User]:
        """
        Users whose email contains ``email_filter`` (case-insensitive),
        newest first.  An empty filter matches everyone.
        """
        stmt = select(UserRecord)
        if email_filter:
            stmt = stmt.where(
                func.lower(UserRecord.email).contains(email_filter.lower(), autoescape=True)
            )
        stmt = stmt.order_by(UserRecord.created_at.desc()).limit(limit).offset(offset)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except (SQLAlchemyError, OverflowError) as exc:
            # OverflowError: the driver cannot bind an out-of-range LIMIT/OFFSET.
            raise StoreError(f"repository.list: {exc}") from exc
        return [_to_user(row) for row in rows]

    async def _get_one(self, criterion, op: str) -> User:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(UserRecord).where(criterion))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"{op}: {exc}") from exc
        if row is None:
            raise NotFoundError()
        return _to_user(row)


__all__ = ["UserStore"]
