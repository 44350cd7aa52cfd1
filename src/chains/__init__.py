"""LangChain chains and text processing for game generation."""

from src.chains.code_editor import CodeEditorChain, EditResult
from src.chains.consultation import ConsultationChain
from src.chains.game_generator import GameGeneratorChain
from src.chains.request_builder import Difficulty, GenerationRequest

__all__ = [
    "CodeEditorChain",
    "ConsultationChain",
    "Difficulty",
    "EditResult",
    "GameGeneratorChain",
    "GenerationRequest",
]
