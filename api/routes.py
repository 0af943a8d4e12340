"""
User API routes. Every route requires a valid bearer token.

Route prefix: /api/v1/users
"""

from __future__ import annotations

import uuid
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from api.errors import ForbiddenError, RequestError
from auth.dependencies import get_current_user_id, get_identity_service
from core.identity_service import IdentityService
from utils.schemas import UpdateUserRequest, UserEnvelope, UserListEnvelope

router = APIRouter(tags=["users"], dependencies=[Depends(get_current_user_id)])

# limit/offset are bound as signed 64-bit integers by the database driver.
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _parse_user_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise RequestError("user ID must be a valid UUID", code="invalid_id") from None


async def require_owner(
    user_id: str,
    auth_user_id: uuid.UUID = Depends(get_current_user_id),
) -> uuid.UUID:
    """
    Resolve the path id and reject callers who do not own it.

    Runs as a dependency so a non-owner gets 403 before the request body
    is validated.
    """
    target_id = _parse_user_id(user_id)
    if auth_user_id != target_id:
        raise ForbiddenError()
    return target_id


@router.get("", response_model=UserListEnvelope)
async def list_users(
    email: str = "",
    limit: int = Query(0, ge=_INT64_MIN, le=_INT64_MAX),
    offset: int = Query(0, ge=_INT64_MIN, le=_INT64_MAX),
    service: IdentityService = Depends(get_identity_service),
) -> Dict[str, Any]:
    """List users, newest first, optionally filtered by email substring."""
    users = await service.list_users(email, limit, offset)
    return {"data": users}


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(
    user_id: str,
    service: IdentityService = Depends(get_identity_service),
) -> Dict[str, Any]:
    user = await service.get_by_id(_parse_user_id(user_id))
    return {"data": user}


@router.put("/{user_id}", response_model=UserEnvelope)
async def update_user(
    req: UpdateUserRequest,
    target_id: uuid.UUID = Depends(require_owner),
    service: IdentityService = Depends(get_identity_service),
) -> Dict[str, Any]:
    """Update the caller's own name and/or email."""
    if req.is_empty():
        raise RequestError("at least one field (name, email) must be provided")

    user = await service.update_user(target_id, name=req.name, email=req.email)
    return {"data": user}
