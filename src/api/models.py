"""API request and response models."""

from pydantic import BaseModel, Field


class ConsultRequest(BaseModel):
    """Request model for the clarification question."""

    idea: str = Field(description="Ý tưởng trò chơi")
    age_group: str = Field(description="Độ tuổi người chơi")


class ConsultResponse(BaseModel):
    """Response model for the clarification question."""

    question: str = Field(description="Câu hỏi làm rõ cơ chế game")


class ChatRequest(BaseModel):
    """Request model for a chat edit."""

    code: str = Field(description="Code HTML hiện tại")
    message: str = Field(description="Yêu cầu chỉnh sửa")


class ChatResponse(BaseModel):
    """Response model for a chat edit."""

    text: str = Field(description="Tin nhắn trả lời")
    code: str | None = Field(default=None, description="Code HTML mới (nếu có)")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(description="Loại lỗi")
    detail: str = Field(description="Chi tiết lỗi")
