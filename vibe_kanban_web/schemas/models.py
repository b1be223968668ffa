"""
Pydantic models for the Vibe Kanban configuration service.

Ported from the client's configuration dataclasses with Pydantic v2 features.
These models are the single source of truth for API request/response shapes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import EditorType, ExecutorType, ThemeMode

# =============================================================================
# Configuration Record
# =============================================================================


class ExecutorConfigModel(BaseModel):
    """Coding agent selection. Parameters other than ``type`` are kept as given."""

    model_config = ConfigDict(extra="allow")

    type: ExecutorType = ExecutorType.CLAUDE


class EditorConfigModel(BaseModel):
    """Editor selection."""

    editor_type: EditorType = EditorType.VSCODE
    custom_command: str | None = None

    @model_validator(mode="after")
    def require_custom_command(self) -> EditorConfigModel:
        """A custom editor needs a launch command."""
        if self.editor_type == EditorType.CUSTOM and not (self.custom_command or "").strip():
            msg = "custom_command is required when editor_type is 'custom'"
            raise ValueError(msg)
        return self


class ConfigPayload(BaseModel):
    """The full configuration record."""

    disclaimer_acknowledged: bool = False
    onboarding_acknowledged: bool = False
    github_login_acknowledged: bool = False
    telemetry_acknowledged: bool = False
    analytics_enabled: bool | None = None
    executor: ExecutorConfigModel = Field(default_factory=ExecutorConfigModel)
    editor: EditorConfigModel = Field(default_factory=EditorConfigModel)
    theme: ThemeMode = ThemeMode.SYSTEM


# =============================================================================
# Request / Response Models
# =============================================================================


class ConfigResponse(BaseModel):
    """The stored record with its version token."""

    config: ConfigPayload
    version: int = Field(ge=0)


class ConfigUpdateRequest(BaseModel):
    """Full-record write. ``version`` must be greater than the stored version."""

    config: ConfigPayload
    version: int = Field(ge=1)


class VersionConflictDetail(BaseModel):
    """Body of a 409 response."""

    message: str
    current_version: int
    attempted_version: int
