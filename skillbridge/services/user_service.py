"""User service for account lookups."""

from sqlalchemy.ext.asyncio import AsyncSession

from skillbridge.core.logging import get_logger
from skillbridge.models.user import User
from skillbridge.schemas.user import UserCreate

logger = get_logger(__name__)


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """Create a user.

    Note: This function commits the transaction.
    """
    user = User(email=data.email, name=data.name, learning_minutes=0)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User created", user_id=user.id)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)
