"""SSE event models for streaming game generation."""

from enum import Enum

from pydantic import BaseModel, Field


class SSEEventType(str, Enum):
    """Types of SSE events."""

    CHUNK = "chunk"
    COMPLETE = "complete"
    ERROR = "error"


class ChunkEvent(BaseModel):
    """Raw text delta from the model, in arrival order."""

    event_type: str = Field(default=SSEEventType.CHUNK.value, description="Event type")
    text: str = Field(description="Text appended to the artifact")


class CompleteEvent(BaseModel):
    """Generation complete event with the final artifact."""

    event_type: str = Field(default=SSEEventType.COMPLETE.value, description="Event type")
    code: str = Field(description="Cleaned HTML with audio payloads restored")


class ErrorEvent(BaseModel):
    """Error event."""

    event_type: str = Field(default=SSEEventType.ERROR.value, description="Event type")
    error: str = Field(description="User facing error message")
