#!/usr/bin/env python3
"""
Vibe Kanban client - Main Entry Point.

Allows running as: python main.py.
"""

import sys

from vibe_kanban_app.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
