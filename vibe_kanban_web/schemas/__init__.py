"""
Pydantic schemas for the Vibe Kanban configuration service.

This package contains all Pydantic models that serve as the
single source of truth for both API validation and OpenAPI generation.
"""

from .enums import EditorType, ExecutorType, ThemeMode
from .models import (
    ConfigPayload,
    ConfigResponse,
    ConfigUpdateRequest,
    EditorConfigModel,
    ExecutorConfigModel,
    VersionConflictDetail,
)

__all__ = [
    "ConfigPayload",
    "ConfigResponse",
    "ConfigUpdateRequest",
    "EditorConfigModel",
    "EditorType",
    "ExecutorConfigModel",
    "ExecutorType",
    "ThemeMode",
    "VersionConflictDetail",
]
