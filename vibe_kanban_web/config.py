"""
Application configuration using Pydantic Settings.

Single source of configuration for the configuration service.
Loads from environment variables with .env file support.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Vibe Kanban Config Service"
    app_version: str = "0.1.0"
    debug: bool = False
    sql_echo: bool = False  # Log all SQL statements (very verbose, disable by default)
    environment: Literal["development", "staging", "production"] = "development"

    # API Settings
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string into list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Database
    sqlite_path: str = "vibe_kanban_config.db"
    database_url_override: str | None = None  # Async SQLite or PostgreSQL URL

    @computed_field
    @property
    def database_url(self) -> str:
        """Get the active database URL."""
        if self.database_url_override:
            return self.database_url_override
        return f"sqlite+aiosqlite:///{self.sqlite_path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
