"""User, learning time and progress routes."""

from fastapi import APIRouter, HTTPException, status

from skillbridge.api.deps import DBDep
from skillbridge.core.logging import get_logger
from skillbridge.schemas.user import (
    LearningTimeAdd,
    LearningTimeResponse,
    UserCreate,
    UserProgressResponse,
    UserResponse,
)
from skillbridge.services import learning_time_service, roadmap_service, user_service

logger = get_logger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, db: DBDep) -> dict:
    user = await user_service.create_user(db, data)
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: DBDep) -> dict:
    user = await user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)


@router.get("/{user_id}/learning-time", response_model=LearningTimeResponse)
async def get_learning_time(user_id: str, db: DBDep) -> dict:
    """Get the user's total learning minutes."""
    minutes = await learning_time_service.get_learning_minutes(db, user_id)
    if minutes is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return {"userId": user_id, "learningMinutes": minutes}


@router.post("/{user_id}/learning-time", response_model=LearningTimeResponse)
async def add_learning_time(user_id: str, data: LearningTimeAdd, db: DBDep) -> dict:
    """Add whole minutes of learning time (used by clients tracking time locally)."""
    try:
        total = await learning_time_service.add_learning_time(db, user_id, data.minutes)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e
    return {"userId": user_id, "learningMinutes": total}


@router.get("/{user_id}/progress", response_model=UserProgressResponse)
async def get_progress(user_id: str, db: DBDep) -> dict:
    """Progress across the user's roadmaps, quiz totals and learning time."""
    summary = await roadmap_service.get_user_progress_summary(db, user_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return summary.model_dump(mode="json", by_alias=True)
