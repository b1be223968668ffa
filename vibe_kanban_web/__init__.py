"""
Vibe Kanban configuration service.

FastAPI application that stores the installation's single configuration
record and enforces the version rule for concurrent writes.
"""
