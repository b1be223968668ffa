#!/usr/bin/env python3
"""
Service Protocol Interfaces for the Vibe Kanban client.

The configuration store and dialog sequencer type hint against these
protocols, so a session can run against the HTTP service or an in-process
stand-in.

Usage:
    from vibe_kanban_app.services.protocols import ConfigPersistenceProtocol

    async def bootstrap(service: ConfigPersistenceProtocol) -> None:
        versioned = await service.load_config()
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vibe_kanban_app.core.dataclasses_config import ConfigurationRecord, VersionedConfig


@runtime_checkable
class ConfigPersistenceProtocol(Protocol):
    """
    Protocol for the remote configuration persistence service.

    There is no partial-update operation: callers always send the full record.
    """

    async def load_config(self) -> VersionedConfig:
        """
        Fetch the installation's configuration record.

        Raises:
            ConfigLoadError: If the service is unreachable or returns a malformed record.

        """
        ...

    async def save_config(self, record: ConfigurationRecord, version: int) -> int:
        """
        Replace the stored record.

        Args:
            record: The full record to store
            version: Version token for this write; must exceed the stored version

        Returns:
            The version the service acknowledged

        Raises:
            StaleConfigVersionError: If ``version`` is not newer than the stored version
            ConfigSaveError: For any other failure

        """
        ...

    async def aclose(self) -> None:
        """Release any transport resources."""
        ...
