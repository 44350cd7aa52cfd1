"""Tests for the Streamlit UI helpers and state models."""

import pytest
from pydantic import ValidationError

from src.chains.assets import AudioAssets
from src.chains.request_builder import Difficulty


class FakeUpload:
    """Stand-in for Streamlit's UploadedFile."""

    def __init__(self, data: bytes, type: str | None = "audio/mpeg"):
        self._data = data
        self.type = type

    def getvalue(self) -> bytes:
        return self._data


class TestUIComponents:
    """Test UI helper functions."""

    def test_artifact_download(self):
        """Test the generated game is exported as a single HTML file."""
        from src.ui.utils import artifact_download

        download = artifact_download("<!DOCTYPE html><html>🚀</html>")

        assert download.file_name == "game-giao-duc.html"
        assert download.mime == "text/html"
        assert download.data == "<!DOCTYPE html><html>🚀</html>".encode("utf-8")

    def test_format_difficulty(self):
        """Test Vietnamese difficulty labels."""
        from src.ui.utils import format_difficulty

        assert format_difficulty(Difficulty.EASY) == "Dễ"
        assert format_difficulty("Medium") == "Vừa"
        assert format_difficulty("Hard") == "Khó"
        assert format_difficulty("UNKNOWN") == "UNKNOWN"

    def test_format_status(self):
        from src.ui.utils import format_status

        assert format_status("streaming") == "Đang viết code..."
        assert format_status("other") == "other"

    def test_encode_upload(self):
        from src.ui.utils import encode_upload

        assert encode_upload(FakeUpload(b"abc", "audio/wav")) == "data:audio/wav;base64,YWJj"
        assert encode_upload(FakeUpload(b"abc", None)) == "data:audio/mpeg;base64,YWJj"
        assert encode_upload(FakeUpload(b"")) is None
        assert encode_upload(None) is None

    def test_build_audio_assets(self):
        from src.ui.utils import build_audio_assets

        assets = build_audio_assets(correct=FakeUpload(b"abc"))

        assert assets == AudioAssets(correct="data:audio/mpeg;base64,YWJj")


class TestUIState:
    """Test UI state models."""

    def test_generation_state_defaults(self):
        """Test GenerationState model."""
        from src.ui.state import GenerationState, GenerationStatus

        state = GenerationState()

        assert state.status == GenerationStatus.IDLE
        assert state.code == ""
        assert state.error is None
        assert state.is_busy is False
        assert state.has_game is False

    @pytest.mark.parametrize(
        "status,busy",
        [
            ("idle", False),
            ("loading", True),
            ("consulting", True),
            ("streaming", True),
            ("success", False),
            ("error", False),
        ],
    )
    def test_busy_statuses(self, status, busy):
        from src.ui.state import GenerationState

        assert GenerationState(status=status).is_busy is busy

    def test_generation_state_is_immutable(self):
        from src.ui.state import GenerationState

        state = GenerationState()

        with pytest.raises(ValidationError):
            state.code = "<html>"

    def test_chat_message_roles(self):
        from src.ui.state import ChatMessage

        message = ChatMessage(role="user", text="Xin chào")

        assert len(message.id) == 32
        with pytest.raises(ValidationError):
            ChatMessage(role="system", text="x")
