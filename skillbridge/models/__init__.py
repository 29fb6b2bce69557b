"""Database models."""

from skillbridge.models.quiz import QuizResult
from skillbridge.models.roadmap import Roadmap
from skillbridge.models.user import User

__all__ = [
    "User",
    "Roadmap",
    "QuizResult",
]
