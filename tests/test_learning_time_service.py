"""Tests for learning time persistence."""

from contextlib import asynccontextmanager

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from skillbridge.core.exceptions import PersistenceError
from skillbridge.models import User
from skillbridge.services import learning_time_service
from skillbridge.services.time_tracker import LearningTimeTracker, VisibilityGate


@pytest.mark.asyncio
async def test_add_learning_time(test_session: AsyncSession, seed_user: User) -> None:
    total = await learning_time_service.add_learning_time(test_session, seed_user.id, 5)
    assert total == 5
    total = await learning_time_service.add_learning_time(test_session, seed_user.id, 3)
    assert total == 8

    assert await learning_time_service.get_learning_minutes(test_session, seed_user.id) == 8


@pytest.mark.asyncio
async def test_add_learning_time_unknown_user(test_session: AsyncSession) -> None:
    with pytest.raises(ValueError, match="not found"):
        await learning_time_service.add_learning_time(test_session, "missing", 5)


@pytest.mark.asyncio
async def test_add_learning_time_rejects_non_positive(
    test_session: AsyncSession, seed_user: User
) -> None:
    with pytest.raises(ValueError, match="positive"):
        await learning_time_service.add_learning_time(test_session, seed_user.id, 0)


@pytest.mark.asyncio
async def test_get_learning_minutes_unknown_user(test_session: AsyncSession) -> None:
    assert await learning_time_service.get_learning_minutes(test_session, "missing") is None


@pytest.mark.asyncio
async def test_persistence_callback_commits(
    test_session: AsyncSession, seed_user: User, session_factory
) -> None:
    persist = learning_time_service.make_persistence_callback(session_factory)
    await persist(seed_user.id, 4)
    await persist(seed_user.id, 2)

    assert await learning_time_service.get_learning_minutes(test_session, seed_user.id) == 6


@pytest.mark.asyncio
async def test_persistence_callback_wraps_database_errors() -> None:
    @asynccontextmanager
    async def broken_factory():
        raise OperationalError("UPDATE users", {}, Exception("database is locked"))
        yield  # pragma: no cover

    persist = learning_time_service.make_persistence_callback(broken_factory)
    with pytest.raises(PersistenceError, match="database is locked"):
        await persist("user-1", 3)


@pytest.mark.asyncio
async def test_tracker_flushes_into_database(
    test_session: AsyncSession, seed_user: User, session_factory
) -> None:
    now = [0]
    tracker = LearningTimeTracker(
        seed_user.id,
        learning_time_service.make_persistence_callback(session_factory),
        gate=VisibilityGate(True),
        interval_seconds=300,
        clock=lambda: now[0],
    )
    tracker.start(run_ticker=False)

    now[0] += 7 * 60_000 + 15_000
    assert await tracker.tick() == 7
    now[0] += 50_000
    await tracker.teardown()

    assert await learning_time_service.get_learning_minutes(test_session, seed_user.id) == 8
    assert tracker.accumulated_ms == 5_000
