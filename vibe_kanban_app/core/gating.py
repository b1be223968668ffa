#!/usr/bin/env python3
"""
First-run gating decisions.

Pure functions from a configuration record to the dialog the shell must show.
The rules are evaluated in a fixed order and the first match wins:

    1. disclaimer not acknowledged        -> Disclaimer dialog
    2. onboarding not acknowledged        -> Onboarding dialog
    3. github login or telemetry pending  -> no dialog, auto-resolve privacy flags
    4. otherwise                          -> ready

Nothing here performs I/O; the dialog sequencer applies and persists the
partial records these functions produce.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from vibe_kanban_app.core.constants import ACKNOWLEDGEMENT_FIELDS, ActiveDialog, ConfigField, GateState
from vibe_kanban_app.core.dataclasses_config import ConfigurationRecord, OnboardingResult

PartialRecord = dict[str, Any]


@dataclass(frozen=True)
class GateDecision:
    """Result of evaluating the gate against one record."""

    state: GateState
    active_dialog: ActiveDialog
    auto_resolution: PartialRecord | None = None

    @property
    def is_ready(self) -> bool:
        return self.state == GateState.READY


def privacy_auto_resolution() -> PartialRecord:
    """Partial record applied without asking once onboarding is done (analytics default off)."""
    return {
        ConfigField.GITHUB_LOGIN_ACKNOWLEDGED: True,
        ConfigField.TELEMETRY_ACKNOWLEDGED: True,
        ConfigField.ANALYTICS_ENABLED: False,
    }


def evaluate_gate(record: ConfigurationRecord) -> GateDecision:
    """Decide which dialog, if any, the record requires."""
    # Disclaimer always comes first, even if onboarding is (wrongly) marked done
    if not record.disclaimer_acknowledged:
        return GateDecision(GateState.DISCLAIMER_PENDING, ActiveDialog.DISCLAIMER)

    if not record.onboarding_acknowledged:
        return GateDecision(GateState.ONBOARDING_PENDING, ActiveDialog.ONBOARDING)

    if not record.github_login_acknowledged or not record.telemetry_acknowledged:
        return GateDecision(
            GateState.PRIVACY_AUTORESOLVE_PENDING,
            ActiveDialog.NONE,
            auto_resolution=privacy_auto_resolution(),
        )

    return GateDecision(GateState.READY, ActiveDialog.NONE)


def disclaimer_resolution() -> PartialRecord:
    """Partial record for an accepted disclaimer. Touches no other flag."""
    return {ConfigField.DISCLAIMER_ACKNOWLEDGED: True}


def onboarding_resolution(result: OnboardingResult) -> PartialRecord:
    """
    Partial record for a completed onboarding.

    The flag and the user's executor/editor choices travel in one merge so a
    record with onboarding done but no executor is never produced.
    """
    return {
        ConfigField.ONBOARDING_ACKNOWLEDGED: True,
        ConfigField.EXECUTOR: result.executor,
        ConfigField.EDITOR: result.editor,
    }


def is_monotonic(before: ConfigurationRecord, after: ConfigurationRecord) -> bool:
    """True if no acknowledgement flag went from True back to False."""
    return all(getattr(after, name) or not getattr(before, name) for name in ACKNOWLEDGEMENT_FIELDS)
