"""
Client configuration using Pydantic Settings.

Loads from environment variables (prefix ``VIBE_KANBAN_``) with .env file support.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Settings for a client session."""

    model_config = SettingsConfigDict(
        env_prefix="VIBE_KANBAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistence service
    service_url: str = "http://127.0.0.1:8000"
    api_prefix: str = "/api/v1"
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # How long session teardown waits for in-flight saves before giving up
    shutdown_save_timeout_seconds: float = Field(default=5.0, ge=0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_file: str | None = None

    @computed_field
    @property
    def config_endpoint(self) -> str:
        """Path of the configuration resource on the service."""
        return f"{self.api_prefix.rstrip('/')}/config"


@lru_cache
def get_settings() -> ClientSettings:
    """Get cached settings instance."""
    return ClientSettings()
