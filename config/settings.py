"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./data/users.db"
    auto_migrate: bool = True           # create the users table on startup

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = "change-me-in-production"        # HMAC secret for session tokens
    jwt_expiry_seconds: int = 86400                    # 24 hours
    bcrypt_rounds: int = 12

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8080
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


config = Settings()
