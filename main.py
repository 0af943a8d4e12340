"""
User identity service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router as users_router
from auth.dependencies import AuthorizationGate
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.tokens import TokenIssuer
from config.settings import Settings, config
from core.identity_service import IdentityService
from database.session import build_engine, build_session_factory, create_schema
from database.user_store import UserStore

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Wire every component explicitly from ``settings``; no module globals."""
    settings = settings or config

    engine = build_engine(settings.database_url)
    store = UserStore(build_session_factory(engine))
    tokens = TokenIssuer(settings.jwt_secret, timedelta(seconds=settings.jwt_expiry_seconds))
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_migrate:
            await create_schema(engine)
        logger.info("Application ready to accept requests.")
        yield
        await engine.dispose()

    app = FastAPI(
        title="User Identity Service",
        version="1.0.0",
        description="Registration, sign-in and token-gated user profiles.",
        lifespan=lifespan,
    )
    app.state.identity_service = IdentityService(store, tokens, hasher)
    app.state.authorization_gate = AuthorizationGate(tokens)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")
    app.include_router(users_router, prefix="/api/v1/users")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


configure_logging(config.debug)

app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )
