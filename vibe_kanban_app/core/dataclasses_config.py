#!/usr/bin/env python3
"""Configuration record dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from vibe_kanban_app.core.constants import ConfigField, EditorType, ExecutorType, ThemeMode
from vibe_kanban_app.core.exceptions import ConfigValidationError, ErrorCodes


@dataclass(frozen=True)
class ExecutorConfig:
    """
    Automation backend selection.

    ``params`` holds whatever else the backend needs; it is opaque to the
    gating flow and is written back exactly as it was read.
    """

    type: ExecutorType = ExecutorType.CLAUDE
    params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire form ``{"type": ..., **params}``."""
        return {**self.params, "type": str(self.type)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExecutorConfig:
        """Create from the wire form."""
        if not isinstance(data, Mapping):
            msg = f"executor must be an object, got {type(data).__name__}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_FORMAT)
        raw_type = data.get("type")
        try:
            executor_type = ExecutorType(raw_type)
        except ValueError as e:
            msg = f"Unknown executor type: {raw_type!r}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_INPUT, {"type": raw_type}) from e
        params = {key: value for key, value in data.items() if key != "type"}
        return cls(type=executor_type, params=params)


@dataclass(frozen=True)
class EditorConfig:
    """Editor used to open task worktrees."""

    editor_type: EditorType = EditorType.VSCODE
    custom_command: str | None = None

    def __post_init__(self) -> None:
        """Reject a custom editor without a launch command."""
        if self.editor_type == EditorType.CUSTOM and not (self.custom_command or "").strip():
            msg = "A custom editor requires a non-empty custom_command"
            raise ConfigValidationError(msg, ErrorCodes.MISSING_REQUIRED, {"editor_type": str(self.editor_type)})

    def to_dict(self) -> dict[str, Any]:
        return {"editor_type": str(self.editor_type), "custom_command": self.custom_command}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EditorConfig:
        """Create from the wire form."""
        if not isinstance(data, Mapping):
            msg = f"editor must be an object, got {type(data).__name__}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_FORMAT)
        raw_type = data.get("editor_type", EditorType.get_default())
        try:
            editor_type = EditorType(raw_type)
        except ValueError as e:
            msg = f"Unknown editor type: {raw_type!r}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_INPUT, {"editor_type": raw_type}) from e
        return cls(editor_type=editor_type, custom_command=data.get("custom_command"))


@dataclass(frozen=True)
class ConfigurationRecord:
    """
    The installation's setup state.

    One record exists per installation. It is immutable here; changes are
    expressed as partial records (field name -> value) and applied with
    ``merged``.
    """

    # === Acknowledgement flags ===
    disclaimer_acknowledged: bool = False
    onboarding_acknowledged: bool = False
    github_login_acknowledged: bool = False
    telemetry_acknowledged: bool = False

    # None means the user was never asked
    analytics_enabled: bool | None = None

    # === Choices made during onboarding ===
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    theme: ThemeMode = ThemeMode.SYSTEM

    @classmethod
    def create_default(cls) -> ConfigurationRecord:
        """Create the record a fresh installation starts with."""
        return cls()

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire form sent to the persistence service."""
        return {
            ConfigField.DISCLAIMER_ACKNOWLEDGED: self.disclaimer_acknowledged,
            ConfigField.ONBOARDING_ACKNOWLEDGED: self.onboarding_acknowledged,
            ConfigField.GITHUB_LOGIN_ACKNOWLEDGED: self.github_login_acknowledged,
            ConfigField.TELEMETRY_ACKNOWLEDGED: self.telemetry_acknowledged,
            ConfigField.ANALYTICS_ENABLED: self.analytics_enabled,
            ConfigField.EXECUTOR: self.executor.to_dict(),
            ConfigField.EDITOR: self.editor.to_dict(),
            ConfigField.THEME: str(self.theme),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConfigurationRecord:
        """
        Create from the wire form.

        Missing fields fall back to first-install defaults; present fields
        must have the right shape.

        Raises:
            ConfigValidationError: If a field has the wrong type or value.

        """
        if not isinstance(data, Mapping):
            msg = f"Configuration record must be an object, got {type(data).__name__}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_FORMAT)
        known = {key: value for key, value in data.items() if key in cls.field_names()}
        return cls.create_default().merged(known)

    def merged(self, partial: Mapping[str, Any]) -> ConfigurationRecord:
        """
        Return a copy with the fields in ``partial`` replaced (shallow merge).

        Values may be given in domain form (``ExecutorConfig``) or wire form
        (plain dicts and strings).

        Raises:
            ConfigValidationError: If ``partial`` names an unknown field or a value is malformed.

        """
        unknown = set(partial) - self.field_names()
        if unknown:
            msg = f"Unknown configuration field(s): {', '.join(sorted(unknown))}"
            raise ConfigValidationError(msg, ErrorCodes.UNKNOWN_FIELD, {"fields": sorted(unknown)})
        if not partial:
            return self
        changes = {str(name): _coerce_field(str(name), value) for name, value in partial.items()}
        return replace(self, **changes)


@dataclass(frozen=True)
class VersionedConfig:
    """A record as returned by the persistence service, with its version token."""

    record: ConfigurationRecord
    version: int = 0


@dataclass(frozen=True)
class OnboardingResult:
    """Payload delivered by the onboarding dialog on completion."""

    executor: ExecutorConfig
    editor: EditorConfig

    def __post_init__(self) -> None:
        if not isinstance(self.executor, ExecutorConfig):
            msg = "Onboarding result requires an ExecutorConfig"
            raise ConfigValidationError(msg, ErrorCodes.MISSING_REQUIRED)
        if not isinstance(self.editor, EditorConfig):
            msg = "Onboarding result requires an EditorConfig"
            raise ConfigValidationError(msg, ErrorCodes.MISSING_REQUIRED)


def _coerce_field(name: str, value: Any) -> Any:
    """Validate one field value and convert wire form to domain form."""
    if name in (
        ConfigField.DISCLAIMER_ACKNOWLEDGED,
        ConfigField.ONBOARDING_ACKNOWLEDGED,
        ConfigField.GITHUB_LOGIN_ACKNOWLEDGED,
        ConfigField.TELEMETRY_ACKNOWLEDGED,
    ):
        if not isinstance(value, bool):
            msg = f"{name} must be a boolean, got {value!r}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_INPUT, {"field": name})
        return value

    if name == ConfigField.ANALYTICS_ENABLED:
        if value is not None and not isinstance(value, bool):
            msg = f"{name} must be a boolean or null, got {value!r}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_INPUT, {"field": name})
        return value

    if name == ConfigField.EXECUTOR:
        return value if isinstance(value, ExecutorConfig) else ExecutorConfig.from_dict(value)

    if name == ConfigField.EDITOR:
        return value if isinstance(value, EditorConfig) else EditorConfig.from_dict(value)

    # Theme
    try:
        return ThemeMode(value)
    except ValueError as e:
        msg = f"Unknown theme: {value!r}"
        raise ConfigValidationError(msg, ErrorCodes.INVALID_INPUT, {"field": name}) from e
