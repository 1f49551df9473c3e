"""
Centralised configuration via Pydantic Settings.

Reads from .env in dev and from the host's environment variables in production.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CATEGORY_FOLDERS: dict[str, str] = {
    "Knit Showroom": "ks",
    "Woven Showroom": "ws",
    "Sample Section": "ss",
    "Merchandising": "m",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Application ─────────────────────────────────────────
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    api_prefix: str = ""

    # ── Supabase ────────────────────────────────────────────
    supabase_url: str = ""
    supabase_key: str = ""  # service role key; storage writes need it
    storage_bucket: str = "gsl"

    # ── Images ──────────────────────────────────────────────
    image_quality: int = Field(default=60, ge=1, le=100, description="WebP quality factor")

    # ── Records ─────────────────────────────────────────────
    record_backend: Literal["supabase", "sql"] = "supabase"
    database_url: str = "sqlite+aiosqlite:///./dev.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def assemble_db_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgres:// but SQLAlchemy needs postgresql+asyncpg://."""
        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+asyncpg://", 1)
        elif v.startswith("postgresql://"):
            v = v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("api_prefix")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ── Service categories ──────────────────────────────────
    service_category_folders: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_FOLDERS)
    )
    default_category_folder: str = "others"


@lru_cache
def get_settings() -> Settings:
    return Settings()
