"""User and learning time schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, PositiveInt
from pydantic.alias_generators import to_camel


class UserModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(UserModel):
    """Create user request."""

    email: str | None = None
    name: str | None = None


class UserResponse(UserModel):
    """User response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None
    name: str | None
    learning_minutes: int
    created_at: datetime


class LearningTimeAdd(UserModel):
    """Whole minutes of foreground learning to add."""

    minutes: PositiveInt


class LearningTimeResponse(UserModel):
    user_id: str
    learning_minutes: int


class RoadmapProgressSummary(UserModel):
    id: str
    title: str
    total_nodes: int
    completed_nodes: int
    progress: int


class UserProgressStats(UserModel):
    total_roadmaps: int
    total_nodes: int
    completed_nodes: int
    overall_progress: int
    total_quizzes_passed: int
    total_quizzes_taken: int
    learning_minutes: int


class UserProgressResponse(UserModel):
    """Progress across all of a user's roadmaps."""

    user_id: str
    roadmaps: list[RoadmapProgressSummary]
    stats: UserProgressStats
