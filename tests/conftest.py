"""Shared fixtures: isolated SQLite databases and an API client."""

import asyncio
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import NullPool, StaticPool

from skillbridge.api.deps import get_db, get_session_factory
from skillbridge.core.config import Settings, get_settings
from skillbridge.core.database import build_engine, build_session_maker, create_tables
from skillbridge.main import app
from skillbridge.models import Roadmap, User


def make_session_factory(engine: AsyncEngine):
    """Same commit/rollback contract as core.database.get_db_session."""
    maker = build_session_maker(engine)

    @asynccontextmanager
    async def session_factory() -> AsyncGenerator[AsyncSession, None]:
        session = maker()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    return session_factory


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    maker = build_session_maker(test_engine)
    async with maker() as session:
        yield session


@pytest.fixture
def session_factory(test_engine: AsyncEngine):
    return make_session_factory(test_engine)


@pytest_asyncio.fixture
async def seed_user(test_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(email=f"{uuid.uuid4().hex[:8]}@test.com", name="Test User", learning_minutes=0)
    test_session.add(user)
    await test_session.commit()
    return user


@pytest.fixture
def client(tmp_path: Path):
    """API client on a throwaway SQLite file.

    NullPool keeps connections from outliving the event loop that opened
    them (TestClient runs the app on its own loop).
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    asyncio.run(create_tables(engine))
    session_factory = make_session_factory(engine)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_settings] = lambda: Settings(
        LEARNING_TIME_SAVE_INTERVAL_SECONDS=3600
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        asyncio.run(engine.dispose())


@pytest_asyncio.fixture
async def seed_roadmap(test_session: AsyncSession, seed_user: User) -> Roadmap:
    """Create a three-step roadmap n1 -> n2 -> n3."""
    roadmap = Roadmap(
        user_id=seed_user.id,
        title="Python Roadmap",
        nodes=[
            {"id": f"n{i}", "data": {"label": f"Step {i}", "description": "", "resources": []}}
            for i in (1, 2, 3)
        ],
        edges=[
            {"id": "e1-2", "source": "n1", "target": "n2"},
            {"id": "e2-3", "source": "n2", "target": "n3"},
        ],
    )
    test_session.add(roadmap)
    await test_session.commit()
    return roadmap
