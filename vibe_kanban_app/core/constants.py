#!/usr/bin/env python3
"""
Constants for the Vibe Kanban client.
Centralized definitions for the string enums used by the configuration record and gating flow.
"""

from enum import StrEnum

# ============================================================================
# CONFIGURATION RECORD VALUES
# ============================================================================


class ThemeMode(StrEnum):
    """Theme preference stored in the configuration record."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

    @classmethod
    def get_default(cls) -> "ThemeMode":
        """Get the default theme."""
        return cls.SYSTEM


class EditorType(StrEnum):
    """Editors the client knows how to launch."""

    VSCODE = "vscode"
    CURSOR = "cursor"
    WINDSURF = "windsurf"
    INTELLIJ = "intellij"
    ZED = "zed"
    CUSTOM = "custom"  # Requires a custom launch command

    @classmethod
    def get_default(cls) -> "EditorType":
        """Get the default editor type."""
        return cls.VSCODE


class ExecutorType(StrEnum):
    """
    Automation backends a task can be executed with.

    Only the ``type`` discriminator is interpreted here; any further
    executor parameters are carried through the record untouched.
    """

    ECHO = "echo"
    CLAUDE = "claude"
    AMP = "amp"
    GEMINI = "gemini"
    AAA = "aaa"
    CHARM_OPENCODE = "charm-opencode"
    SST_OPENCODE = "sst-opencode"
    CLAUDE_CODE_ROUTER = "claude-code-router"
    AIDER = "aider"
    CODEX = "codex"

    @classmethod
    def get_default(cls) -> "ExecutorType":
        """Get the default executor type."""
        return cls.CLAUDE


# ============================================================================
# GATING
# ============================================================================


class ConfigField(StrEnum):
    """Field names of the configuration record (wire and merge keys)."""

    DISCLAIMER_ACKNOWLEDGED = "disclaimer_acknowledged"
    ONBOARDING_ACKNOWLEDGED = "onboarding_acknowledged"
    GITHUB_LOGIN_ACKNOWLEDGED = "github_login_acknowledged"
    TELEMETRY_ACKNOWLEDGED = "telemetry_acknowledged"
    ANALYTICS_ENABLED = "analytics_enabled"
    EXECUTOR = "executor"
    EDITOR = "editor"
    THEME = "theme"


# Flags that a correct flow only ever moves from False to True
ACKNOWLEDGEMENT_FIELDS: tuple[ConfigField, ...] = (
    ConfigField.DISCLAIMER_ACKNOWLEDGED,
    ConfigField.ONBOARDING_ACKNOWLEDGED,
    ConfigField.GITHUB_LOGIN_ACKNOWLEDGED,
    ConfigField.TELEMETRY_ACKNOWLEDGED,
)


class ActiveDialog(StrEnum):
    """Dialog the shell must currently display."""

    NONE = "none"
    DISCLAIMER = "disclaimer"
    ONBOARDING = "onboarding"


class GateState(StrEnum):
    """States of the first-run gate, in presentation order."""

    DISCLAIMER_PENDING = "disclaimer_pending"  # S0
    ONBOARDING_PENDING = "onboarding_pending"  # S1
    PRIVACY_AUTORESOLVE_PENDING = "privacy_autoresolve_pending"  # S2
    READY = "ready"  # S3, terminal


class ShellPhase(StrEnum):
    """What the shell renders as a whole."""

    LOADING = "loading"
    LOAD_FAILED = "load_failed"
    GATED = "gated"
    READY = "ready"
