"""Utility functions for the Streamlit UI."""

from dataclasses import dataclass
from typing import Any

from src.chains.assets import AudioAssets, encode_audio
from src.chains.request_builder import DIFFICULTY_LABELS, Difficulty
from src.config import settings

STATUS_LABELS = {
    "idle": "Sẵn sàng",
    "loading": "Đang chuẩn bị...",
    "consulting": "Đang chờ bạn trả lời câu hỏi",
    "streaming": "Đang viết code...",
    "success": "Hoàn thành",
    "error": "Có lỗi",
}


@dataclass
class ArtifactDownload:
    """Everything a download button needs."""

    file_name: str
    mime: str
    data: bytes


def artifact_download(code: str) -> ArtifactDownload:
    """Package the generated game as a single HTML file."""
    return ArtifactDownload(
        file_name=settings.download_filename,
        mime="text/html",
        data=code.encode("utf-8"),
    )


def format_difficulty(difficulty: Difficulty | str) -> str:
    """Convert a difficulty value to its Vietnamese label."""
    try:
        return DIFFICULTY_LABELS[Difficulty(difficulty)]
    except ValueError:
        return str(difficulty)


def format_status(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def encode_upload(uploaded_file: Any | None) -> str | None:
    """Turn an uploaded audio file into a data URI (None when nothing uploaded).

    Args:
        uploaded_file: Object with ``getvalue()`` and ``type`` (Streamlit UploadedFile).
    """
    if uploaded_file is None:
        return None
    data = uploaded_file.getvalue()
    if not data:
        return None
    return encode_audio(data, getattr(uploaded_file, "type", None) or "audio/mpeg")


def build_audio_assets(
    background: Any | None = None,
    correct: Any | None = None,
    incorrect: Any | None = None,
) -> AudioAssets:
    """Build AudioAssets from the three optional uploads."""
    return AudioAssets(
        background=encode_upload(background),
        correct=encode_upload(correct),
        incorrect=encode_upload(incorrect),
    )
