#!/usr/bin/env python3
"""
Application bootstrap utilities.

Provides shared, UI-agnostic setup for logging.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "WARNING", log_file: str | Path | None = None) -> Path | None:
    """
    Set up logging for a client session.

    Args:
        level: Root log level name.
        log_file: Optional file to log to in addition to stderr.

    Returns:
        Path to log file, or None if using default stderr.

    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_path: Path | None = None

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    return log_path
