#!/usr/bin/env python
"""
Module entry point for the Vibe Kanban client.

This allows the client to be run as:
    python -m vibe_kanban_app
or via the installed console script:
    vibe-kanban
"""

from __future__ import annotations

import logging
import sys

logger = logging.getLogger(__name__)


def main() -> int:
    """Main entry point for the module."""
    try:
        from vibe_kanban_app.main import main as app_main

        return app_main()
    except KeyboardInterrupt:
        logger.info("Session interrupted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error during session startup")
        return 1


if __name__ == "__main__":
    sys.exit(main())
