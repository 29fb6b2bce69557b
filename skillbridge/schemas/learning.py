"""Learning session WebSocket messages."""

from enum import Enum

from pydantic import BaseModel


class LearningEventType(str, Enum):
    """Client-to-server message types."""

    VISIBILITY = "visibility"  # Page shown or hidden
    FLUSH = "flush"  # Save whole minutes now
    PING = "ping"


class LearningEvent(BaseModel):
    """Message sent by the client during a learning session."""

    type: LearningEventType
    visible: bool | None = None
