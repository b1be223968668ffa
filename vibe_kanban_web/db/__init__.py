"""
Database package for the Vibe Kanban configuration service.

Provides SQLAlchemy models and session management.
"""

from .models import SINGLETON_ID, AppConfig, Base
from .session import async_engine, async_session_maker, get_async_session

__all__ = [
    "SINGLETON_ID",
    "AppConfig",
    "Base",
    "async_engine",
    "async_session_maker",
    "get_async_session",
]
