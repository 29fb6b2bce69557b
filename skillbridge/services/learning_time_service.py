"""Learning time persistence."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skillbridge.core.database import get_db_session
from skillbridge.core.exceptions import PersistenceError
from skillbridge.core.logging import get_logger
from skillbridge.models.user import User
from skillbridge.services.time_tracker import PersistCallback

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


async def add_learning_time(
    db: AsyncSession,
    user_id: str,
    minutes: int,
) -> int:
    """Add whole minutes to a user's learning time.

    Args:
        db: Database session
        user_id: User ID
        minutes: Minutes to add (must be positive)

    Returns:
        The user's new total in minutes

    Raises:
        ValueError: If minutes is not positive or the user does not exist

    Note: This function assumes the caller will commit the transaction.
    """
    if minutes <= 0:
        raise ValueError("minutes must be positive")

    # Increment in SQL so concurrent sessions of one user do not overwrite each other
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(learning_minutes=User.learning_minutes + minutes)
        .returning(User.learning_minutes)
    )
    total = result.scalar_one_or_none()
    if total is None:
        raise ValueError(f"User {user_id} not found")

    logger.info("Learning time added", user_id=user_id, minutes=minutes, total_minutes=total)
    return total


async def get_learning_minutes(db: AsyncSession, user_id: str) -> int | None:
    """Get a user's total learning minutes, or None if the user does not exist."""
    result = await db.execute(select(User.learning_minutes).where(User.id == user_id))
    return result.scalar_one_or_none()


def make_persistence_callback(
    session_factory: SessionFactory = get_db_session,
) -> PersistCallback:
    """Build the callback a LearningTimeTracker flushes into.

    Each call opens its own session and commits. Database failures surface as
    PersistenceError so the tracker keeps the minutes for its next tick.
    """

    async def persist(user_id: str, minutes: int) -> None:
        try:
            async with session_factory() as db:
                await add_learning_time(db, user_id, minutes)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not save {minutes} min for user {user_id}: {e}") from e

    return persist
