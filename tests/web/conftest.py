"""
Pytest fixtures for the configuration service API tests.

The database fixtures live in the top-level conftest so integration tests can share them.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vibe_kanban_web.main import app


@pytest_asyncio.fixture(scope="function")
async def client(setup_db) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
