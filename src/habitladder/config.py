"""Application settings via pydantic-settings."""

from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with HL_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="HL_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    database_url: str  # required: startup fails without it
    create_schema: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Access ---
    admin_emails: list[str] = []
    # POST /api/admin/cleanup is refused while this is unset
    admin_cleanup_password: str | None = None

    # --- Session token ---
    session_secret: str = "dev-only-session-secret-change-me-in-production"
    session_algorithm: str = "HS256"
    session_issuer: str = "habitladder"
    session_expire_minutes: int = 60 * 24 * 30
    session_cookie_name: str = "hl_session"
    session_cookie_secure: bool = False

    # --- Accounts ---
    password_min_length: int = 8
    password_max_length: int = 128

    # --- Storage ---
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_timeout_seconds: float = 10.0
    db_connect_timeout_seconds: float = 10.0
    db_command_timeout_seconds: float = 15.0


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def settings_for(conn: Any) -> Settings:
    """Settings of the application serving ``conn`` (a request or websocket).

    ``create_app(settings)`` stores its settings on ``app.state``; a bare
    connection with no app falls back to the process-wide settings.
    """
    app = conn.scope.get("app")
    settings = getattr(getattr(app, "state", None), "settings", None)
    return settings if settings is not None else get_settings()
