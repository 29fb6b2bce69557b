"""Pydantic schemas."""

from skillbridge.schemas.quiz import (
    QuizGenerateRequest,
    QuizGenerateResponse,
    QuizQuestion,
    QuizResultResponse,
    QuizScore,
    QuizSubmitRequest,
    QuizSubmitResponse,
)
from skillbridge.schemas.roadmap import (
    EdgeType,
    NodeCategory,
    NodeData,
    NodeStatus,
    QuizResultSignal,
    RoadmapCreate,
    RoadmapEdge,
    RoadmapGenerateRequest,
    RoadmapGraph,
    RoadmapNode,
    RoadmapProgress,
    RoadmapResponse,
    RoadmapUpdate,
)
from skillbridge.schemas.user import (
    LearningTimeAdd,
    LearningTimeResponse,
    UserCreate,
    UserProgressResponse,
    UserResponse,
)

__all__ = [
    "EdgeType",
    "NodeCategory",
    "NodeData",
    "NodeStatus",
    "QuizResultSignal",
    "RoadmapCreate",
    "RoadmapEdge",
    "RoadmapGenerateRequest",
    "RoadmapGraph",
    "RoadmapNode",
    "RoadmapProgress",
    "RoadmapResponse",
    "RoadmapUpdate",
    "QuizGenerateRequest",
    "QuizGenerateResponse",
    "QuizQuestion",
    "QuizResultResponse",
    "QuizScore",
    "QuizSubmitRequest",
    "QuizSubmitResponse",
    "LearningTimeAdd",
    "LearningTimeResponse",
    "UserCreate",
    "UserProgressResponse",
    "UserResponse",
]
