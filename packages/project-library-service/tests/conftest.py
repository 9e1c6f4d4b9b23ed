"""Service test fixtures backed by a throwaway SQLite database."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from _helpers import RecordingMediaStore
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from project_library_service.db.deps import get_session
from project_library_service.db.engine import build_engine, make_session_factory
from project_library_service.db.models import Base
from project_library_service.media import get_media_store
from project_library_service.rest.app import create_app


@pytest.fixture
def database_url(tmp_path) -> str:
    """Create the schema in a fresh SQLite file and return its async URL."""
    path = tmp_path / "project_library.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def session_factory(database_url) -> async_sessionmaker[AsyncSession]:
    engine = build_engine(database_url, poolclass=NullPool)
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def media_store() -> RecordingMediaStore:
    return RecordingMediaStore()


@pytest.fixture
def client(session_factory, media_store) -> TestClient:
    """Full application wired to the test database (lifespan not run)."""
    app = create_app()

    async def _test_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _test_session
    app.dependency_overrides[get_media_store] = lambda: media_store
    return TestClient(app)
