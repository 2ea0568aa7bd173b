"""Settings — read once from the environment (and .env) via pydantic-settings.

Invariants:
    - get_settings() returns the same instance for the life of the process
    - With no environment at all the API runs against ./lessonbook.db (SQLite)
    - Ledger rules (low-balance threshold, passcode length, rating range) are not
      settings; they live in core/ and cannot drift per deployment

Design Decisions:
    - DATABASE_URL accepts the plain postgresql:// form hosts hand out
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ASYNC_POSTGRES_PREFIX = "postgresql+asyncpg://"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    database_url: str = "sqlite+aiosqlite:///./lessonbook.db"
    database_pool_size: int = Field(5, ge=1)
    database_max_overflow: int = Field(5, ge=0)
    # off once alembic owns the schema
    database_create_schema: bool = True

    max_upload_bytes: int = Field(10 * 1024 * 1024, gt=0)

    session_ttl_seconds: int = Field(12 * 3600, gt=0)
    max_sessions: int = Field(32, ge=1)

    cors_origins: list[str] = ["http://localhost:5173"]

    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_postgres_driver(cls, v: str) -> str:
        return normalize_database_url(v) if isinstance(v, str) else v


def normalize_database_url(url: str) -> str:
    """postgresql:// and postgres:// become postgresql+asyncpg://; others pass through."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return ASYNC_POSTGRES_PREFIX + url[len(prefix):]
    return url


@lru_cache
def get_settings() -> Settings:
    return Settings()
