"""API dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillbridge.core.database import get_db_session, get_session
from skillbridge.services.learning_time_service import SessionFactory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_session():
        yield session


def get_session_factory() -> SessionFactory:
    """Session factory for long-lived connections that open short sessions."""
    return get_db_session


# Database dependency
DBDep = Annotated[AsyncSession, Depends(get_db)]

SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]
