"""State models for the game studio session."""

from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class GenerationStatus(str, Enum):
    """Lifecycle of one generation flow."""

    IDLE = "idle"
    LOADING = "loading"
    CONSULTING = "consulting"
    STREAMING = "streaming"
    SUCCESS = "success"
    ERROR = "error"


BUSY_STATUSES = (
    GenerationStatus.LOADING,
    GenerationStatus.CONSULTING,
    GenerationStatus.STREAMING,
)


class GenerationState(BaseModel):
    """State for game generation.

    Immutable: every transition builds a complete new value.
    """

    model_config = ConfigDict(frozen=True)

    status: GenerationStatus = Field(default=GenerationStatus.IDLE, description="Trạng thái")
    code: str = Field(default="", description="Code HTML hiện tại")
    error: str | None = Field(default=None, description="Thông báo lỗi")

    @property
    def is_busy(self) -> bool:
        return self.status in BUSY_STATUSES

    @property
    def has_game(self) -> bool:
        return self.status in (GenerationStatus.SUCCESS, GenerationStatus.STREAMING)


class ChatMessage(BaseModel):
    """One message in the chat panel."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex, description="Mã tin nhắn")
    role: Literal["user", "assistant"] = Field(description="Người gửi")
    text: str = Field(description="Nội dung")
