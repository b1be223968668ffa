"""
Tests for the dialog sequencer.

Covers the first-run walkthrough, apply-then-save semantics, the one-shot
privacy auto-resolution and completion callback handling.
"""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from vibe_kanban_app.core.constants import ActiveDialog, ExecutorType, GateState, ShellPhase, ThemeMode
from vibe_kanban_app.core.dataclasses_config import ConfigurationRecord, OnboardingResult, VersionedConfig
from vibe_kanban_app.core.exceptions import ConfigLoadError, ConfigSaveError, ConfigValidationError, ErrorCodes
from vibe_kanban_app.services.config_service import InMemoryConfigService
from vibe_kanban_app.ui.dialog_sequencer import DialogSequencer
from vibe_kanban_app.ui.store import ConfigStore

ONBOARDED = ConfigurationRecord(disclaimer_acknowledged=True, onboarding_acknowledged=True)


def failing_save_service(record: ConfigurationRecord, version: int = 0) -> MagicMock:
    """Service that loads ``record`` and fails every save."""
    service = MagicMock()
    service.load_config = AsyncMock(return_value=VersionedConfig(record, version))
    service.save_config = AsyncMock(side_effect=ConfigSaveError("disk full", ErrorCodes.CONFIG_SAVE_FAILED))
    service.aclose = AsyncMock()
    return service


async def start_sequencer(service, presenter=None) -> tuple[ConfigStore, DialogSequencer]:
    store = ConfigStore(service)
    sequencer = DialogSequencer(store, service, presenter)
    sequencer.start()
    await store.load()
    return store, sequencer


# ============================================================================
# Test Walkthrough
# ============================================================================


class TestFirstRunWalkthrough:
    """Tests for the full first-run sequence."""

    @pytest.mark.asyncio
    async def test_fresh_install_opens_disclaimer(self, in_memory_service, presenter) -> None:
        """A fresh record opens only the disclaimer."""
        _, sequencer = await start_sequencer(in_memory_service, presenter)

        assert sequencer.active_dialog == ActiveDialog.DISCLAIMER
        assert sequencer.gate_state == GateState.DISCLAIMER_PENDING
        assert sequencer.phase == ShellPhase.GATED
        assert presenter.calls == [(ActiveDialog.DISCLAIMER, True)]

    @pytest.mark.asyncio
    async def test_accepting_disclaimer_opens_onboarding(self, in_memory_service, presenter) -> None:
        """Accepting the disclaimer dismisses it, opens onboarding and saves the flag."""
        store, sequencer = await start_sequencer(in_memory_service, presenter)

        assert presenter.complete(ActiveDialog.DISCLAIMER) is True

        assert store.get().disclaimer_acknowledged is True
        assert sequencer.active_dialog == ActiveDialog.ONBOARDING
        assert presenter.calls[1:] == [(ActiveDialog.DISCLAIMER, False), (ActiveDialog.ONBOARDING, True)]

        assert await sequencer.wait_for_pending_saves(timeout=1)
        assert in_memory_service.record.disclaimer_acknowledged is True
        assert in_memory_service.version == 1
        assert store.state.version == 1

    @pytest.mark.asyncio
    async def test_onboarding_then_auto_resolution_reaches_ready(
        self, in_memory_service, presenter, onboarding_result: OnboardingResult
    ) -> None:
        """Completing onboarding auto-acknowledges privacy flags and reaches ready."""
        store, sequencer = await start_sequencer(in_memory_service, presenter)
        presenter.complete(ActiveDialog.DISCLAIMER)

        assert presenter.complete(ActiveDialog.ONBOARDING, onboarding_result) is True

        record = store.get()
        assert record.onboarding_acknowledged is True
        assert record.executor.type == ExecutorType.AMP
        assert record.github_login_acknowledged is True
        assert record.telemetry_acknowledged is True
        assert record.analytics_enabled is False
        assert sequencer.gate_state == GateState.READY
        assert sequencer.phase == ShellPhase.READY
        assert sequencer.active_dialog == ActiveDialog.NONE

        await sequencer.wait_until_ready()
        assert await sequencer.wait_for_pending_saves(timeout=1)
        assert in_memory_service.record == record

    @pytest.mark.asyncio
    async def test_returning_user_goes_straight_to_ready(self, ready_record, presenter) -> None:
        """A fully acknowledged record opens no dialog and saves nothing."""
        service = InMemoryConfigService(ready_record, version=4)
        _, sequencer = await start_sequencer(service, presenter)

        assert sequencer.phase == ShellPhase.READY
        assert presenter.calls == []
        assert sequencer.pending_save_count == 0
        assert service.save_count == 0

    @pytest.mark.asyncio
    async def test_start_after_load_evaluates_immediately(self, in_memory_service, presenter) -> None:
        """Starting a sequencer on an already loaded store evaluates the gate right away."""
        store = ConfigStore(in_memory_service)
        await store.load()
        sequencer = DialogSequencer(store, in_memory_service, presenter)

        sequencer.start()

        assert sequencer.active_dialog == ActiveDialog.DISCLAIMER

    @pytest.mark.asyncio
    async def test_save_uses_version_above_loaded(self, presenter) -> None:
        """The first write of a session carries the loaded version plus one."""
        service = InMemoryConfigService(version=5)
        store, sequencer = await start_sequencer(service, presenter)

        sequencer.accept_disclaimer()
        await sequencer.wait_for_pending_saves(timeout=1)

        assert service.version == 6
        assert store.state.version == 6


# ============================================================================
# Test Apply Then Save
# ============================================================================


class TestSaveFailures:
    """Tests for optimistic apply with background saves."""

    @pytest.mark.asyncio
    async def test_failed_save_keeps_local_change(self, presenter, caplog) -> None:
        """A failed save is logged; the local record and dialog progression stand."""
        service = failing_save_service(ConfigurationRecord())
        store, sequencer = await start_sequencer(service, presenter)

        with caplog.at_level(logging.ERROR):
            sequencer.accept_disclaimer()
            assert await sequencer.wait_for_pending_saves(timeout=1)

        assert store.get().disclaimer_acknowledged is True
        assert sequencer.active_dialog == ActiveDialog.ONBOARDING
        assert presenter.opened == [ActiveDialog.DISCLAIMER, ActiveDialog.ONBOARDING]
        assert "Error saving config" in caplog.text
        assert store.state.version == 0

    @pytest.mark.asyncio
    async def test_save_sends_full_merged_record(self, presenter) -> None:
        """Saves carry the whole record, not just the changed fields."""
        service = failing_save_service(ConfigurationRecord(theme=ThemeMode.DARK))
        store, sequencer = await start_sequencer(service, presenter)

        sequencer.accept_disclaimer()
        await sequencer.wait_for_pending_saves(timeout=1)

        saved_record, saved_version = service.save_config.await_args.args
        assert saved_record == store.get()
        assert saved_version == 1

    @pytest.mark.asyncio
    async def test_stale_save_is_logged_not_raised(self, presenter, caplog) -> None:
        """A write rejected as stale is reported as a warning."""
        service = InMemoryConfigService()
        store, sequencer = await start_sequencer(service, presenter)
        await service.save_config(ConfigurationRecord(), 10)

        with caplog.at_level(logging.WARNING):
            sequencer.accept_disclaimer()
            await sequencer.wait_for_pending_saves(timeout=1)

        assert "superseded" in caplog.text
        assert store.get().disclaimer_acknowledged is True


# ============================================================================
# Test Privacy Auto-Resolution
# ============================================================================


class TestPrivacyAutoResolution:
    """Tests for the one-shot privacy auto-resolution."""

    @pytest.mark.asyncio
    async def test_applied_on_load_without_dialog(self, presenter) -> None:
        """An onboarded record missing privacy flags resolves without any dialog."""
        service = InMemoryConfigService(ONBOARDED, version=2)
        store, sequencer = await start_sequencer(service, presenter)

        assert presenter.calls == []
        assert sequencer.phase == ShellPhase.READY
        assert store.get().analytics_enabled is False

        await sequencer.wait_for_pending_saves(timeout=1)
        assert service.version == 3
        assert service.record.telemetry_acknowledged is True

    @pytest.mark.asyncio
    async def test_applied_at_most_once_per_session(self, presenter) -> None:
        """If privacy flags go pending again, the auto-resolution is not repeated."""
        service = failing_save_service(ONBOARDED)
        store, sequencer = await start_sequencer(service, presenter)
        await sequencer.wait_for_pending_saves(timeout=1)
        assert service.save_config.await_count == 1

        store.update({"telemetry_acknowledged": False})
        await sequencer.wait_for_pending_saves(timeout=1)

        assert sequencer.gate_state == GateState.PRIVACY_AUTORESOLVE_PENDING
        assert store.get().telemetry_acknowledged is False
        assert service.save_config.await_count == 1

    @pytest.mark.asyncio
    async def test_disables_unasked_analytics(self, presenter) -> None:
        """Auto-resolution turns analytics off when the user was never asked."""
        record = ConfigurationRecord(disclaimer_acknowledged=True, onboarding_acknowledged=True, analytics_enabled=None)
        service = InMemoryConfigService(record)
        store, _ = await start_sequencer(service, presenter)

        assert store.get().analytics_enabled is False


# ============================================================================
# Test Completions
# ============================================================================


class TestCompletions:
    """Tests for dialog completion handling."""

    @pytest.mark.asyncio
    async def test_repeated_completion_ignored(self, in_memory_service, presenter) -> None:
        """A completion callback fires at most once."""
        _, sequencer = await start_sequencer(in_memory_service, presenter)
        complete = presenter.completions[ActiveDialog.DISCLAIMER]

        assert complete() is True
        assert complete() is False
        await sequencer.wait_for_pending_saves(timeout=1)
        assert in_memory_service.save_count == 1

    @pytest.mark.asyncio
    async def test_accept_disclaimer_when_not_active(self, ready_record, presenter) -> None:
        """Accepting a disclaimer that is not shown changes nothing."""
        service = InMemoryConfigService(ready_record)
        _, sequencer = await start_sequencer(service, presenter)

        assert sequencer.accept_disclaimer() is False
        assert sequencer.pending_save_count == 0

    @pytest.mark.asyncio
    async def test_onboarding_completion_while_disclaimer_open(
        self, in_memory_service, presenter, onboarding_result: OnboardingResult
    ) -> None:
        """Onboarding cannot be completed before the disclaimer."""
        store, sequencer = await start_sequencer(in_memory_service, presenter)

        assert sequencer.complete_onboarding(onboarding_result) is False
        assert store.get().onboarding_acknowledged is False

    @pytest.mark.asyncio
    async def test_onboarding_requires_result(self, in_memory_service, presenter) -> None:
        """Onboarding completion without a proper result is rejected."""
        _, sequencer = await start_sequencer(in_memory_service, presenter)
        sequencer.accept_disclaimer()

        with pytest.raises(ConfigValidationError):
            sequencer.complete_onboarding({"executor": "claude"})
        assert sequencer.active_dialog == ActiveDialog.ONBOARDING

    @pytest.mark.asyncio
    async def test_stop_dismisses_open_dialog(self, in_memory_service, presenter) -> None:
        """Stopping the sequencer closes the active dialog."""
        _, sequencer = await start_sequencer(in_memory_service, presenter)

        sequencer.stop()

        assert sequencer.active_dialog == ActiveDialog.NONE
        assert presenter.calls[-1] == (ActiveDialog.DISCLAIMER, False)


# ============================================================================
# Test Load Failure
# ============================================================================


class TestLoadFailure:
    """Tests for gating when the record cannot be loaded."""

    @pytest.mark.asyncio
    async def test_load_failure_blocks_without_dialog(self, presenter) -> None:
        """A failed load shows no dialog and never reaches ready."""
        service = MagicMock()
        service.load_config = AsyncMock(side_effect=ConfigLoadError("unreachable", ErrorCodes.SERVICE_UNREACHABLE))
        _, sequencer = await start_sequencer(service, presenter)

        assert sequencer.phase == ShellPhase.LOAD_FAILED
        assert sequencer.active_dialog == ActiveDialog.NONE
        assert presenter.calls == []
        assert sequencer.gate_state is None


# ============================================================================
# Test Loading And Shutdown
# ============================================================================


def slow_load_service(record: ConfigurationRecord, entered: asyncio.Event, release: asyncio.Event) -> MagicMock:
    """Service whose load waits for ``release``."""

    async def load_config() -> VersionedConfig:
        entered.set()
        await release.wait()
        return VersionedConfig(record, 0)

    service = MagicMock()
    service.load_config = AsyncMock(side_effect=load_config)
    service.aclose = AsyncMock()
    return service


class TestLoadingPhase:
    """Tests for the shell while the record is still being fetched."""

    @pytest.mark.asyncio
    async def test_nothing_rendered_while_loading(self, fresh_record, presenter) -> None:
        """Until the load returns the shell shows loading and no dialog."""
        entered = asyncio.Event()
        release = asyncio.Event()
        service = slow_load_service(fresh_record, entered, release)
        store = ConfigStore(service)
        sequencer = DialogSequencer(store, service, presenter)
        sequencer.start()

        load = asyncio.create_task(store.load())
        await asyncio.wait_for(entered.wait(), timeout=1)

        assert sequencer.phase == ShellPhase.LOADING
        assert sequencer.active_dialog == ActiveDialog.NONE
        assert sequencer.gate_state is None
        assert presenter.calls == []

        release.set()
        await load

        assert sequencer.phase == ShellPhase.GATED
        assert presenter.calls == [(ActiveDialog.DISCLAIMER, True)]


class TestPendingSaves:
    """Tests for waiting on in-flight saves."""

    @pytest.mark.asyncio
    async def test_timeout_reports_saves_still_in_flight(self, fresh_record, presenter, caplog) -> None:
        """A save that outlives the timeout is reported and left running."""
        release = asyncio.Event()

        async def hung_save(record: ConfigurationRecord, version: int) -> int:
            await release.wait()
            return version

        service = MagicMock()
        service.load_config = AsyncMock(return_value=VersionedConfig(fresh_record, 0))
        service.save_config = AsyncMock(side_effect=hung_save)
        _, sequencer = await start_sequencer(service, presenter)
        sequencer.accept_disclaimer()

        with caplog.at_level(logging.WARNING):
            assert await sequencer.wait_for_pending_saves(timeout=0.01) is False

        assert "1 config save(s) still in flight after 0.01s" in caplog.text
        assert sequencer.pending_save_count == 1

        release.set()
        assert await sequencer.wait_for_pending_saves(timeout=1) is True
