"""UI module for the Streamlit web interface."""

from src.ui.api_client import APIClient
from src.ui.session import GameSession
from src.ui.state import ChatMessage, GenerationState, GenerationStatus
from src.ui.utils import artifact_download, format_difficulty

__all__ = [
    "APIClient",
    "ChatMessage",
    "GameSession",
    "GenerationState",
    "GenerationStatus",
    "artifact_download",
    "format_difficulty",
]
