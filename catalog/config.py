"""Catalog Settings - database, catalog policy and logging knobs from the environment.

Invariants:
    - get_settings() is cached (lru_cache) - single instance per process
    - daily_creation_limit feeds the business-rule cap; listing_cache_ttl_seconds
      bounds how long the "all_products" snapshots live

Design Decisions:
    - pydantic-settings reads env vars and .env, case-insensitive
    - database_create_tables is for local runs; deployments migrate with alembic
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://catalog:catalog@db:5432/catalog"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_create_tables: bool = False

    # Catalog policy
    daily_creation_limit: int = 500
    listing_cache_ttl_seconds: int = 300

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
