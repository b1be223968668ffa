#!/usr/bin/env python3
"""
Vibe Kanban client session core.

Decides which first-run dialog must be shown before the main interface and
keeps the installation's configuration record in sync with the user's choices.
"""

__version__ = "0.1.0"
__author__ = "Vibe Kanban Team"
__description__ = "First-run gating and configuration sync for the Vibe Kanban client"
