"""API routes."""

from skillbridge.api.routes import learning, quiz, roadmaps, users

__all__ = ["roadmaps", "quiz", "users", "learning"]
