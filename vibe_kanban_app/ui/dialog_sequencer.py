"""
Dialog sequencing for the first-run gate.

The sequencer sits between the configuration store, the gating rules and a
dialog presenter. On every record change it re-evaluates the gate, opens or
dismisses dialogs, and turns resolutions into the same two steps:

    1. merge the partial record into the store (optimistic, immediate)
    2. save the full merged record in the background (failures are logged)

A save never rolls back the local record and never re-opens a dismissed
dialog. Whatever did not reach the service is asked again on the next launch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from vibe_kanban_app.core.constants import ActiveDialog, GateState, ShellPhase
from vibe_kanban_app.core.dataclasses_config import OnboardingResult
from vibe_kanban_app.core.exceptions import (
    ConfigSaveError,
    ConfigStoreError,
    ConfigValidationError,
    ErrorCodes,
    StaleConfigVersionError,
)
from vibe_kanban_app.core.gating import (
    PartialRecord,
    disclaimer_resolution,
    evaluate_gate,
    onboarding_resolution,
)
from vibe_kanban_app.ui.store import Actions, Selectors

if TYPE_CHECKING:
    from vibe_kanban_app.core.dataclasses_config import ConfigurationRecord
    from vibe_kanban_app.services.protocols import ConfigPersistenceProtocol
    from vibe_kanban_app.ui.protocols import DialogCompletion, DialogPresenterProtocol
    from vibe_kanban_app.ui.store import ConfigState, ConfigStore, UnsubscribeFunction

logger = logging.getLogger(__name__)


class DialogSequencer:
    """Drives the first-run dialogs from configuration store changes."""

    def __init__(
        self,
        store: ConfigStore,
        service: ConfigPersistenceProtocol,
        presenter: DialogPresenterProtocol | None = None,
    ) -> None:
        self._store = store
        self._service = service
        self._presenter = presenter

        self._active_dialog = ActiveDialog.NONE
        self._gate_state: GateState | None = None
        self._open_cycle = 0
        self._auto_resolution_applied = False
        self._last_version = 0
        self._pending_saves: set[asyncio.Task[None]] = set()
        self._ready = asyncio.Event()
        self._unsubscribe: UnsubscribeFunction | None = None

    # === Lifecycle ===

    def start(self) -> None:
        """Subscribe to the store and evaluate the gate if a record is already loaded."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._store.subscribe(self._on_state_change)
        if Selectors.is_loaded(self._store.state):
            self._reconcile(self._store.state.record)

    def stop(self) -> None:
        """Unsubscribe and dismiss whatever dialog is open."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._show(ActiveDialog.NONE)

    # === Read access ===

    @property
    def active_dialog(self) -> ActiveDialog:
        return self._active_dialog

    @property
    def gate_state(self) -> GateState | None:
        return self._gate_state

    @property
    def phase(self) -> ShellPhase:
        """What the shell should render: loading, error, a gated dialog, or the main interface."""
        base = Selectors.base_phase(self._store.state)
        if base is not None:
            return base
        if self._gate_state == GateState.READY:
            return ShellPhase.READY
        return ShellPhase.GATED

    @property
    def pending_save_count(self) -> int:
        return len(self._pending_saves)

    async def wait_until_ready(self) -> None:
        """Wait until the gate reaches its terminal state."""
        await self._ready.wait()

    async def wait_for_pending_saves(self, timeout: float | None = None) -> bool:
        """
        Wait for in-flight saves, including saves started while waiting.

        Returns:
            True if every save finished, False if ``timeout`` expired first.

        """
        try:
            async with asyncio.timeout(timeout):
                while self._pending_saves:
                    await asyncio.wait(set(self._pending_saves))
        except TimeoutError:
            logger.warning("%d config save(s) still in flight after %ss", len(self._pending_saves), timeout)
            return False
        return True

    # === User resolutions ===

    def accept_disclaimer(self) -> bool:
        """
        Record that the user accepted the disclaimer.

        Returns:
            False (and changes nothing) if the disclaimer is not the active dialog.

        """
        if self._active_dialog != ActiveDialog.DISCLAIMER:
            logger.warning("Ignoring disclaimer acceptance: active dialog is %s", self._active_dialog)
            return False
        self._resolve(disclaimer_resolution(), reason="disclaimer accepted")
        return True

    def complete_onboarding(self, result: OnboardingResult) -> bool:
        """
        Record the user's onboarding choices together with the onboarding flag.

        Returns:
            False (and changes nothing) if onboarding is not the active dialog.

        Raises:
            ConfigValidationError: If ``result`` is not an ``OnboardingResult``.

        """
        if not isinstance(result, OnboardingResult):
            msg = f"Onboarding completion requires an OnboardingResult, got {type(result).__name__}"
            raise ConfigValidationError(msg, ErrorCodes.INVALID_INPUT)
        if self._active_dialog != ActiveDialog.ONBOARDING:
            logger.warning("Ignoring onboarding completion: active dialog is %s", self._active_dialog)
            return False
        self._resolve(onboarding_resolution(result), reason="onboarding completed")
        return True

    # === Gate evaluation ===

    def _on_state_change(self, old_state: ConfigState, new_state: ConfigState) -> None:
        if Selectors.load_failed(new_state):
            if not Selectors.load_failed(old_state):
                logger.error("Config failed to load; gated interface stays blocked: %s", new_state.load_error)
            self._show(ActiveDialog.NONE)
            return

        if not Selectors.is_loaded(new_state):
            return

        if new_state.record != old_state.record or not Selectors.is_loaded(old_state):
            self._reconcile(new_state.record)

    def _reconcile(self, record: ConfigurationRecord) -> None:
        decision = evaluate_gate(record)
        if decision.state != self._gate_state:
            logger.info("Gate state: %s -> %s", self._gate_state, decision.state)
            self._gate_state = decision.state

        self._show(decision.active_dialog)

        if decision.auto_resolution is not None:
            if self._auto_resolution_applied:
                logger.debug("Privacy auto-resolution already applied this session, skipping")
            else:
                self._auto_resolution_applied = True
                logger.info("Auto-acknowledging GitHub login and telemetry (analytics disabled)")
                self._resolve(decision.auto_resolution, reason="privacy auto-resolution")

        if decision.is_ready:
            self._ready.set()

    def _show(self, dialog: ActiveDialog) -> None:
        if dialog == self._active_dialog:
            return

        previous = self._active_dialog
        self._active_dialog = dialog
        self._open_cycle += 1
        logger.info("Dialog: %s -> %s", previous, dialog)

        if self._presenter is None:
            return
        if previous != ActiveDialog.NONE:
            self._presenter.render(previous, False, None)
        if dialog != ActiveDialog.NONE:
            self._presenter.render(dialog, True, self._completion_for(dialog, self._open_cycle))

    def _completion_for(self, dialog: ActiveDialog, cycle: int) -> DialogCompletion:
        """One-shot completion callback bound to a single open cycle."""
        fired = False

        def complete(*args: Any) -> bool:
            nonlocal fired
            if fired or cycle != self._open_cycle:
                logger.warning("Ignoring late or repeated completion for %s dialog", dialog)
                return False
            if dialog == ActiveDialog.DISCLAIMER:
                fired = self.accept_disclaimer()
            else:
                fired = self.complete_onboarding(*args)
            return fired

        return complete

    # === Apply then save ===

    def _resolve(self, partial: PartialRecord, reason: str) -> None:
        record = self._store.get()
        if record is None:
            msg = f"Cannot apply {reason} before the configuration is loaded"
            raise ConfigStoreError(msg, ErrorCodes.CONFIG_NOT_LOADED)

        merged = record.merged(partial)
        version = self._next_version()
        self._store.update(partial)

        task = asyncio.create_task(self._save(merged, version, reason))
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    def _next_version(self) -> int:
        # Strictly increasing per session, never below what the service has acknowledged
        self._last_version = max(self._last_version, self._store.state.version) + 1
        return self._last_version

    async def _save(self, record: ConfigurationRecord, version: int, reason: str) -> None:
        try:
            acknowledged = await self._service.save_config(record, version)
        except StaleConfigVersionError as e:
            logger.warning("Config save for %s superseded by a newer write: %s", reason, e)
            return
        except ConfigSaveError as e:
            logger.error("Error saving config (%s): %s", reason, e)
            return
        except Exception as e:
            logger.exception("Unexpected error saving config (%s): %s", reason, e)
            return

        self._store.dispatch_safe(Actions.version_acknowledged(acknowledged))
        logger.info("Config saved (%s) at version %d", reason, acknowledged)
