"""
Auth API routes — register, sign in.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_identity_service
from core.identity_service import IdentityService
from utils.schemas import AuthEnvelope, RegisterRequest, SignInRequest

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthEnvelope, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    service: IdentityService = Depends(get_identity_service),
) -> Dict[str, Any]:
    """Register a new user and return a session token."""
    result = await service.register(req.name, req.email, req.password)
    return {"data": result}


@router.post("/signin", response_model=AuthEnvelope)
async def sign_in(
    req: SignInRequest,
    service: IdentityService = Depends(get_identity_service),
) -> Dict[str, Any]:
    """Sign in with email + password."""
    result = await service.sign_in(req.email, req.password)
    return {"data": result}
