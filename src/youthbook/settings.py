from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="YOUTHBOOK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    database_url: str = "sqlite+aiosqlite:///./youthbook.db"

    # For local development
    auto_create_db: bool = False

    # SQLite serializes writers; waiting connections give up after this many seconds.
    sqlite_busy_timeout_seconds: float = 30.0

    log_level: str = "INFO"
    log_json: bool = False
    log_http_requests: bool = True

    # Keyset pagination bounds. Requested limits are clamped, never rejected.
    # Configured bounds outside 1..100 fail at startup.
    default_page_size: int = Field(default=20, ge=1, le=100)
    max_page_size: int = Field(default=100, ge=1, le=100)


def get_settings() -> Settings:
    return Settings()
