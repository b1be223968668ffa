"""
Session context: the explicitly constructed owner of one client session.

A session is created at startup, handed to the view tree root, and torn down
on exit. It owns the configuration store, the dialog sequencer and the
persistence service; nothing here is module-level state, so tests build one
session per test case.

Usage:
    async with SessionContext(service, presenter) as session:
        if session.sequencer.phase == ShellPhase.LOAD_FAILED:
            ...
        await session.sequencer.wait_until_ready()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vibe_kanban_app.services.config_service import HttpConfigService
from vibe_kanban_app.ui.dialog_sequencer import DialogSequencer
from vibe_kanban_app.ui.store import ConfigStore, logging_middleware

if TYPE_CHECKING:
    from types import TracebackType

    from vibe_kanban_app.config import ClientSettings
    from vibe_kanban_app.core.dataclasses_config import ConfigurationRecord
    from vibe_kanban_app.services.protocols import ConfigPersistenceProtocol
    from vibe_kanban_app.ui.protocols import DialogPresenterProtocol

logger = logging.getLogger(__name__)


class SessionContext:
    """Owns the store, sequencer and persistence service of one session."""

    def __init__(
        self,
        service: ConfigPersistenceProtocol,
        presenter: DialogPresenterProtocol | None = None,
        *,
        shutdown_save_timeout: float | None = 5.0,
        log_actions: bool = False,
    ) -> None:
        self.service = service
        self.store = ConfigStore(service)
        self.sequencer = DialogSequencer(self.store, service, presenter)
        self._shutdown_save_timeout = shutdown_save_timeout
        self._started = False
        self._closed = False

        if log_actions:
            self.store.add_middleware(logging_middleware)

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        presenter: DialogPresenterProtocol | None = None,
    ) -> SessionContext:
        """Build a session talking to the HTTP persistence service."""
        return cls(
            HttpConfigService.from_settings(settings),
            presenter,
            shutdown_save_timeout=settings.shutdown_save_timeout_seconds,
            log_actions=settings.log_level == "DEBUG",
        )

    async def start(self) -> ConfigurationRecord | None:
        """
        Start the session: begin gating and load the configuration record.

        Returns:
            The loaded record, or None if loading failed.

        """
        if not self._started:
            self._started = True
            self.sequencer.start()
            logger.info("Session started")
        return await self.store.load()

    async def close(self) -> None:
        """Tear down: let in-flight saves finish (bounded), stop gating, release the service."""
        if self._closed:
            return
        self._closed = True

        finished = await self.sequencer.wait_for_pending_saves(self._shutdown_save_timeout)
        if not finished:
            logger.warning("Closing session with config saves still pending")
        self.sequencer.stop()
        await self.service.aclose()
        logger.info("Session closed")

    async def __aenter__(self) -> SessionContext:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
