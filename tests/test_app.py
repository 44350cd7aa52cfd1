"""Tests for the Streamlit page."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from src.ui.session import GameSession
from src.ui.state import GenerationState, GenerationStatus

APP_PATH = str(Path(__file__).resolve().parent.parent / "src" / "ui" / "app.py")


@pytest.fixture
def app(monkeypatch, tmp_path):
    """Page pointed at an unreachable engine and an empty key store."""
    monkeypatch.setenv("API_URL", "http://127.0.0.1:9")
    monkeypatch.setattr("src.config.settings.credential_store_path", str(tmp_path / "keys.json"))
    return AppTest.from_file(APP_PATH, default_timeout=30)


class TestSidebar:
    """Test the settings sidebar."""

    def test_help_panel(self, app):
        """Usage steps and API key instructions are available."""
        app.run()

        assert "❓ Hướng dẫn sử dụng" in [e.label for e in app.sidebar.expander]
        help_text = "\n".join(m.value for m in app.sidebar.markdown)
        assert "Cách tạo game" in help_text
        assert "Lấy Google Gemini API Key" in help_text
        assert "https://aistudio.google.com/app/apikey" in help_text


class TestPreview:
    """Test the game area."""

    def test_streaming_shows_whole_document(self, app):
        """The live code view shows the full text so far, not a tail."""
        code = "<!DOCTYPE html>\n<html>\n" + "<p>câu hỏi</p>\n" * 600
        session = GameSession(client=None)
        session.state = GenerationState(status=GenerationStatus.STREAMING, code=code)
        app.session_state["game_session"] = session

        app.run()

        assert app.code[0].value == code
