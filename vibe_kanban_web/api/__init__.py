"""
API routers for the Vibe Kanban configuration service.

- config: read, replace and reset the installation's configuration record
"""
