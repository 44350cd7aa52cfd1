"""API client for communicating with the game engine."""

import json
import logging
import os
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

import httpx

from src.chains.request_builder import GenerationRequest

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-User-API-Key"

CONNECTION_ERROR_MESSAGE = "Không kết nối được máy chủ tạo game. Vui lòng kiểm tra mạng."
INTERRUPTED_MESSAGE = "Quá trình tạo game bị gián đoạn. Vui lòng thử lại."


@dataclass
class CodeChunk:
    """Text delta from the generation stream."""

    text: str


@dataclass
class StreamResult:
    """Final result from SSE stream."""

    success: bool
    code: str | None = None
    error: str | None = None


def _error_detail(response: httpx.Response, default: str) -> str:
    """Pull the friendly ``detail`` out of an engine error response."""
    try:
        detail = response.json().get("detail")
    except (json.JSONDecodeError, AttributeError):
        return default
    return detail if isinstance(detail, str) and detail else default


class APIClient:
    """Client for the game engine API."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            base_url: Base URL of the engine. If not provided, uses API_URL env var
                     or defaults to http://localhost:8000.
            transport: Optional httpx transport (for tests).
        """
        self.base_url = base_url or os.environ.get("API_URL", "http://localhost:8000")
        self.timeout = 120.0  # Longest silence tolerated from the model
        self.transport = transport

    def _client(self, timeout: float | httpx.Timeout) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self.transport)

    def _get_auth_headers(self, api_key: str | None) -> dict[str, str]:
        # No header lets the engine use its own keys
        if not api_key:
            return {}
        return {API_KEY_HEADER: api_key}

    def health_check(self) -> bool:
        """Check if the engine is healthy."""
        try:
            with self._client(timeout=5.0) as client:
                response = client.get(f"{self.base_url}/health")
                return response.status_code == 200
        except httpx.RequestError:
            return False

    def consult(self, idea: str, age_group: str, api_key: str | None = None) -> str:
        """Ask for a clarification question.

        Raises:
            httpx.HTTPStatusError: If the request fails.
        """
        with self._client(timeout=30.0) as client:
            response = client.post(
                f"{self.base_url}/consult",
                json={"idea": idea, "age_group": age_group},
                headers=self._get_auth_headers(api_key),
            )
            response.raise_for_status()
            return response.json()["question"]

    def chat(self, code: str, message: str, api_key: str | None = None) -> dict[str, Any]:
        """Send a change request for the current code.

        Returns:
            ``{"text": ..., "code": ... | None}``

        Raises:
            httpx.HTTPStatusError: If the request fails.
        """
        with self._client(timeout=self.timeout) as client:
            response = client.post(
                f"{self.base_url}/chat",
                json={"code": code, "message": message},
                headers=self._get_auth_headers(api_key),
            )
            response.raise_for_status()
            return response.json()

    def generate_stream(
        self,
        request: GenerationRequest,
        api_key: str | None = None,
    ) -> Generator[CodeChunk | StreamResult, None, None]:
        """Generate a game with streaming code updates.

        Yields CodeChunk objects in arrival order, then exactly one
        StreamResult with the final code or a user facing error.
        """
        headers = self._get_auth_headers(api_key)
        headers["Accept"] = "text/event-stream"

        client = self._client(timeout=httpx.Timeout(10.0, read=self.timeout))
        try:
            with client.stream(
                "POST",
                f"{self.base_url}/generate/stream",
                json=request.model_dump(mode="json"),
                headers=headers,
            ) as response:
                if response.status_code >= 400:
                    response.read()
                    yield StreamResult(
                        success=False,
                        error=_error_detail(response, INTERRUPTED_MESSAGE),
                    )
                    return

                event_type: str | None = None
                data_buffer: str = ""

                for line in response.iter_lines():
                    line = line.strip()

                    if not line:
                        # Empty line marks end of event
                        if event_type and data_buffer:
                            try:
                                data = json.loads(data_buffer)
                            except json.JSONDecodeError:
                                logger.warning(f"Failed to parse SSE data: {data_buffer[:200]}")
                                event_type = None
                                data_buffer = ""
                                continue

                            if event_type == "chunk":
                                yield CodeChunk(text=data["text"])
                            elif event_type == "complete":
                                yield StreamResult(success=True, code=data["code"])
                                return
                            elif event_type == "error":
                                yield StreamResult(
                                    success=False,
                                    error=data.get("error") or INTERRUPTED_MESSAGE,
                                )
                                return

                        event_type = None
                        data_buffer = ""
                        continue

                    if line.startswith("event:"):
                        event_type = line[6:].strip()
                    elif line.startswith("data:"):
                        data_buffer = line[5:].strip()

            yield StreamResult(success=False, error=INTERRUPTED_MESSAGE)
        except httpx.RequestError as e:
            logger.error(f"Request error during streaming: {e}")
            yield StreamResult(success=False, error=CONNECTION_ERROR_MESSAGE)
        finally:
            client.close()
