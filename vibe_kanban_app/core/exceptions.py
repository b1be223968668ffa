#!/usr/bin/env python3
"""
Custom Exception Classes for the Vibe Kanban client
Provides structured error handling for configuration load, save and merge failures.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class VibeKanbanError(Exception):
    """Base exception for all Vibe Kanban client errors."""

    def __init__(self, message: str, error_code: str | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigValidationError(VibeKanbanError):
    """Raised when a configuration record or partial record is malformed."""


class ConfigLoadError(VibeKanbanError):
    """Raised when the configuration record cannot be fetched at startup."""


class ConfigSaveError(VibeKanbanError):
    """Raised when a configuration write is not acknowledged by the persistence service."""


class StaleConfigVersionError(ConfigSaveError):
    """Raised when the persistence service rejects a write carrying an outdated version."""

    def __init__(self, message: str, attempted_version: int, current_version: int | None = None) -> None:
        super().__init__(
            message,
            ErrorCodes.CONFIG_VERSION_STALE,
            {"attempted_version": attempted_version, "current_version": current_version},
        )
        self.attempted_version = attempted_version
        self.current_version = current_version


class ConfigStoreError(VibeKanbanError):
    """Raised when the configuration store is used before it holds a record."""


# Error codes for specific error types
class ErrorCodes(StrEnum):
    """Standardized error codes."""

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_FORMAT = "INVALID_FORMAT"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"

    # Persistence errors
    CONFIG_LOAD_FAILED = "CONFIG_LOAD_FAILED"
    CONFIG_SAVE_FAILED = "CONFIG_SAVE_FAILED"
    CONFIG_VERSION_STALE = "CONFIG_VERSION_STALE"
    SERVICE_UNREACHABLE = "SERVICE_UNREACHABLE"
    TIMEOUT = "TIMEOUT"

    # Store errors
    CONFIG_NOT_LOADED = "CONFIG_NOT_LOADED"
