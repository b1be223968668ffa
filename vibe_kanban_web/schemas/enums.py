"""
String enums for the Vibe Kanban configuration service.

Mirrors the client's core/constants.py. These enums are the single source of
truth for string constants on the service side.
"""

from enum import StrEnum


class ThemeMode(StrEnum):
    """Theme preference."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

    @classmethod
    def get_default(cls) -> "ThemeMode":
        return cls.SYSTEM


class EditorType(StrEnum):
    """Editors the client can launch."""

    VSCODE = "vscode"
    CURSOR = "cursor"
    WINDSURF = "windsurf"
    INTELLIJ = "intellij"
    ZED = "zed"
    CUSTOM = "custom"

    @classmethod
    def get_default(cls) -> "EditorType":
        return cls.VSCODE


class ExecutorType(StrEnum):
    """Coding agent backends."""

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
        return cls.CLAUDE
