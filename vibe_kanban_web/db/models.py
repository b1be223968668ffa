"""
SQLAlchemy ORM models for the Vibe Kanban configuration service.

One table, ``app_config``, holding a single row (id = 1): the installation's
configuration record and the version of its last accepted write.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from vibe_kanban_web.schemas.enums import EditorType, ExecutorType, ThemeMode

SINGLETON_ID = 1


def default_executor() -> dict[str, Any]:
    return {"type": str(ExecutorType.get_default())}


def default_editor() -> dict[str, Any]:
    return {"editor_type": str(EditorType.get_default()), "custom_command": None}


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AppConfig(Base):
    """The installation's configuration record (singleton row)."""

    __tablename__ = "app_config"
    __table_args__ = (CheckConstraint(f"id = {SINGLETON_ID}", name="ck_app_config_singleton"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SINGLETON_ID)

    # Acknowledgement flags
    disclaimer_acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    onboarding_acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    github_login_acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    telemetry_acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    analytics_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Onboarding choices
    executor_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=default_executor, nullable=False)
    editor_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=default_editor, nullable=False)
    theme: Mapped[str] = mapped_column(String(20), default=str(ThemeMode.get_default()), nullable=False)

    # Version of the last accepted write (0 = never written)
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
