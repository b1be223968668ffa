#!/usr/bin/env python3
"""
Vibe Kanban client - Package Main Entry Point.

Runs one client session in the terminal: loads the configuration record,
walks the user through any pending first-run dialogs and exits once the
main interface would be shown.

    python -m vibe_kanban_app [--service-url URL] [--in-memory]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from vibe_kanban_app.app_bootstrap import setup_logging
from vibe_kanban_app.config import ClientSettings, get_settings
from vibe_kanban_app.core.constants import ShellPhase
from vibe_kanban_app.services.config_service import InMemoryConfigService
from vibe_kanban_app.ui.console_presenter import ConsoleDialogPresenter
from vibe_kanban_app.ui.session import SessionContext
from vibe_kanban_app.ui.store import Selectors

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vibe-kanban", description="Run the Vibe Kanban first-run flow.")
    parser.add_argument("--service-url", help="Base URL of the configuration service (overrides VIBE_KANBAN_SERVICE_URL)")
    parser.add_argument("--in-memory", action="store_true", help="Keep the configuration in memory instead of using the service")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level (overrides VIBE_KANBAN_LOG_LEVEL)")
    return parser


EXIT_ABANDONED = 130


async def run_session(
    settings: ClientSettings,
    in_memory: bool = False,
    presenter: ConsoleDialogPresenter | None = None,
) -> int:
    """
    Run one session to completion.

    Returns:
        0 once the gate is passed, 1 if the configuration could not be loaded,
        130 if the user left the flow early (progress so far is kept).

    """
    presenter = presenter or ConsoleDialogPresenter()
    if in_memory:
        session = SessionContext(
            InMemoryConfigService(),
            presenter,
            shutdown_save_timeout=settings.shutdown_save_timeout_seconds,
        )
    else:
        session = SessionContext.from_settings(settings, presenter)

    async with session:
        if session.sequencer.phase == ShellPhase.LOAD_FAILED:
            print(f"Could not load configuration: {session.store.state.load_error}", file=sys.stderr)
            return 1

        ready = asyncio.create_task(session.sequencer.wait_until_ready())
        abandoned = asyncio.create_task(presenter.wait_abandoned())
        try:
            await asyncio.wait({ready, abandoned}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            ready.cancel()
            abandoned.cancel()

        if session.sequencer.phase != ShellPhase.READY:
            print("Setup not finished; it will resume on the next launch.", file=sys.stderr)
            return EXIT_ABANDONED

        print(f"Setup complete. Theme: {Selectors.theme(session.store.state)}")
        return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main application entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).

    """
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.service_url:
        overrides["service_url"] = args.service_url
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = get_settings().model_copy(update=overrides) if overrides else get_settings()

    log_file = setup_logging(settings.log_level, settings.log_file)
    logger.info("Starting Vibe Kanban session against %s", "memory" if args.in_memory else settings.service_url)
    if log_file:
        logger.info("Log file location: %s", log_file)

    return asyncio.run(run_session(settings, in_memory=args.in_memory))


if __name__ == "__main__":
    sys.exit(main())
