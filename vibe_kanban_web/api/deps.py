"""
FastAPI dependencies for injection.

Provides the database session dependency.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vibe_kanban_web.db.session import get_async_session

get_db = get_async_session

# Type alias for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
