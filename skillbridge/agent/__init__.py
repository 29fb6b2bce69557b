"""Roadmap and quiz generation agents."""

from skillbridge.agent.planner import generate_roadmap, normalize_roadmap_payload
from skillbridge.agent.quiz import generate_quiz, normalize_quiz_payload

__all__ = [
    "generate_quiz",
    "generate_roadmap",
    "normalize_quiz_payload",
    "normalize_roadmap_payload",
]
