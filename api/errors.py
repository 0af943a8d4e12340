"""
Error → HTTP response mapping.

All status-code decisions live here; route handlers just raise.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exceptions import (
    ConflictError,
    IdentityError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class ForbiddenError(IdentityError):
    code = "forbidden"
    message = "you can only update your own profile"


class RequestError(IdentityError):
    """Caller input rejected before it reaches the service."""

    code = "validation_error"

    def __init__(self, message: str, *, code: str = "validation_error") -> None:
        super().__init__(message)
        self.code = code


_STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    InvalidTokenError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    RequestError: status.HTTP_400_BAD_REQUEST,
}


def _error_body(code: str, message: str) -> dict:
    return {"error": code, "message": message}


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    field = str(first["loc"][-1]) if first.get("loc") else "request"
    message = str(first.get("msg", "is invalid"))
    # Pydantic prefixes custom validator messages with "Value error, ".
    message = message.removeprefix("Value error, ")
    if message.startswith(field):
        return message
    return f"{field}: {message}"


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain-error and validation-error handlers."""

    @app.exception_handler(IdentityError)
    async def identity_error_handler(request: Request, exc: IdentityError) -> JSONResponse:
        if isinstance(exc, InternalError):
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=exc,
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=_error_body("internal_error", "internal server error"),
            )
        status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return JSONResponse(status_code=status_code, content=_error_body(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("validation_error", _first_validation_message(exc)),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("internal_error", "internal server error"),
        )
