"""Pytest configuration and fixtures."""

import os

import pytest


def pytest_configure(config):
    """Set up test environment variables before tests run."""
    # Keep Secret Manager out of the picture and start without server keys
    os.environ.pop("GOOGLE_PROJECT_ID", None)
    os.environ["GEMINI_API_KEY"] = ""
    os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse_starlette keeps an exit event bound to the first event loop it saw."""
    from sse_starlette.sse import AppStatus

    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
def mock_settings():
    """Provide settings with two server-side keys."""
    from src.config import Settings

    return Settings(gemini_api_key='["server-key-1", "server-key-2"]')


@pytest.fixture
def sample_html():
    """A minimal complete game document."""
    return (
        "<!DOCTYPE html>\n<html>\n<head><title>Game</title></head>\n"
        "<body><canvas id=\"game\"></canvas></body>\n</html>"
    )
