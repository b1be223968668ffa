#!/usr/bin/env python3
"""
Shared test fixtures for the Vibe Kanban client and configuration service.
Provides common records, services and a recording dialog presenter.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vibe_kanban_app.core.constants import ActiveDialog, EditorType, ExecutorType
from vibe_kanban_app.core.dataclasses_config import (
    ConfigurationRecord,
    EditorConfig,
    ExecutorConfig,
    OnboardingResult,
)
from vibe_kanban_app.services.config_service import InMemoryConfigService
from vibe_kanban_web.api.deps import get_db
from vibe_kanban_web.db.models import Base
from vibe_kanban_web.main import app


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "web: mark test as a configuration service API test")


@dataclass
class RecordingPresenter:
    """Dialog presenter that records every render call and keeps the latest completion per dialog."""

    calls: list[tuple[ActiveDialog, bool]] = field(default_factory=list)
    completions: dict[ActiveDialog, Any] = field(default_factory=dict)

    def render(self, dialog: ActiveDialog, open: bool, on_complete: Any) -> None:
        self.calls.append((dialog, open))
        if open:
            self.completions[dialog] = on_complete

    @property
    def opened(self) -> list[ActiveDialog]:
        return [dialog for dialog, is_open in self.calls if is_open]

    def complete(self, dialog: ActiveDialog, *args: Any) -> Any:
        return self.completions[dialog](*args)


@pytest.fixture
def fresh_record() -> ConfigurationRecord:
    """Record of a brand new installation."""
    return ConfigurationRecord.create_default()


@pytest.fixture
def ready_record() -> ConfigurationRecord:
    """Record of an installation that finished first-run setup."""
    return ConfigurationRecord(
        disclaimer_acknowledged=True,
        onboarding_acknowledged=True,
        github_login_acknowledged=True,
        telemetry_acknowledged=True,
        analytics_enabled=True,
    )


@pytest.fixture
def onboarding_result() -> OnboardingResult:
    """Onboarding choices: Amp with Cursor."""
    return OnboardingResult(
        executor=ExecutorConfig(type=ExecutorType.AMP),
        editor=EditorConfig(editor_type=EditorType.CURSOR),
    )


@pytest.fixture
def in_memory_service() -> InMemoryConfigService:
    """Persistence service holding a fresh record at version 0."""
    return InMemoryConfigService()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


# =============================================================================
# Configuration Service Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a test database engine on a throwaway SQLite file (one connection per session)."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_config.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session_maker(test_engine):
    """Create a session maker for the test database."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def setup_db(test_session_maker):
    """Point the app's database dependency at the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    yield

    app.dependency_overrides.clear()
