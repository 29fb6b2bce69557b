"""Service layer modules."""

from skillbridge.services import (
    graph_merge,
    learning_time_service,
    quiz_service,
    roadmap_service,
    time_tracker,
    user_service,
)

__all__ = [
    "graph_merge",
    "learning_time_service",
    "quiz_service",
    "roadmap_service",
    "time_tracker",
    "user_service",
]
