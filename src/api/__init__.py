"""API module for the FastAPI game engine."""

from src.api.models import (
    ChatRequest,
    ChatResponse,
    ConsultRequest,
    ConsultResponse,
    ErrorResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ConsultRequest",
    "ConsultResponse",
    "ErrorResponse",
]
