#!/usr/bin/env python3
"""
UI Protocol Interfaces for the Vibe Kanban client.

The dialog sequencer drives dialogs through ``DialogPresenterProtocol`` and
never draws anything itself; a GUI, a terminal or a test double can render them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vibe_kanban_app.core.constants import ActiveDialog

# Completion callback for one open cycle of a dialog.
# Disclaimer: called with no argument. Onboarding: called with an OnboardingResult.
DialogCompletion = Callable[..., Any]


@runtime_checkable
class DialogPresenterProtocol(Protocol):
    """
    Protocol for rendering the first-run dialogs.

    ``render`` is called with ``open=True`` and a completion callback when a
    dialog must be shown, and with ``open=False`` and ``None`` when it must be
    dismissed. The presenter calls the completion at most once per open cycle;
    further calls are ignored by the sequencer.
    """

    def render(self, dialog: ActiveDialog, open: bool, on_complete: DialogCompletion | None) -> None:
        """Show or dismiss ``dialog``."""
        ...
