"""Tests for the engine HTTP client."""

import json

import httpx
import pytest

from src.chains.request_builder import GenerationRequest
from src.ui.api_client import (
    API_KEY_HEADER,
    CONNECTION_ERROR_MESSAGE,
    INTERRUPTED_MESSAGE,
    APIClient,
    CodeChunk,
    StreamResult,
)


def sse_body(*events: tuple[str, dict]) -> bytes:
    """Encode events the way sse_starlette writes them."""
    parts = [f"event: {event}\r\ndata: {json.dumps(data)}\r\n\r\n" for event, data in events]
    return "".join(parts).encode("utf-8")


def make_client(handler) -> APIClient:
    return APIClient(base_url="http://engine", transport=httpx.MockTransport(handler))


class TestGenerateStream:
    """Test SSE parsing in generate_stream."""

    def test_chunks_then_complete(self):
        """Chunks arrive in order, then one result."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers[API_KEY_HEADER]
            seen["body"] = json.loads(request.content)
            body = sse_body(
                ("chunk", {"event_type": "chunk", "text": "<!DOCTYPE html>"}),
                ("chunk", {"event_type": "chunk", "text": "<html></html>"}),
                ("complete", {"event_type": "complete", "code": "<!DOCTYPE html><html></html>"}),
            )
            return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

        client = make_client(handler)

        updates = list(client.generate_stream(GenerationRequest(idea="Đua xe"), api_key="k1"))

        assert updates == [
            CodeChunk(text="<!DOCTYPE html>"),
            CodeChunk(text="<html></html>"),
            StreamResult(success=True, code="<!DOCTYPE html><html></html>"),
        ]
        assert seen["key"] == "k1"
        assert seen["body"]["idea"] == "Đua xe"
        assert seen["body"]["difficulty"] == "Medium"

    def test_error_event(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = sse_body(("error", {"event_type": "error", "error": "Lỗi rồi"}))
            return httpx.Response(200, content=body)

        updates = list(make_client(handler).generate_stream(GenerationRequest(idea="x"), "k"))

        assert updates == [StreamResult(success=False, error="Lỗi rồi")]

    def test_stream_cut_short(self):
        """A stream without a result event ends in an interrupted result."""

        def handler(request: httpx.Request) -> httpx.Response:
            body = sse_body(("chunk", {"event_type": "chunk", "text": "<!DOCTYPE"}))
            return httpx.Response(200, content=body)

        updates = list(make_client(handler).generate_stream(GenerationRequest(idea="x"), "k"))

        assert updates[-1] == StreamResult(success=False, error=INTERRUPTED_MESSAGE)

    def test_http_error_detail(self):
        """A rejected request surfaces the engine's detail message."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"detail": "Chưa có API Key!"})

        updates = list(make_client(handler).generate_stream(GenerationRequest(idea="x"), "k"))

        assert updates == [StreamResult(success=False, error="Chưa có API Key!")]

    def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        updates = list(make_client(handler).generate_stream(GenerationRequest(idea="x"), "k"))

        assert updates == [StreamResult(success=False, error=CONNECTION_ERROR_MESSAGE)]

    def test_no_key_sends_no_header(self):
        """Without a user key the engine resolves its own key."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["has_key"] = API_KEY_HEADER in request.headers
            body = sse_body(("complete", {"event_type": "complete", "code": "<!DOCTYPE html>"}))
            return httpx.Response(200, content=body)

        updates = list(make_client(handler).generate_stream(GenerationRequest(idea="x")))

        assert seen["has_key"] is False
        assert updates == [StreamResult(success=True, code="<!DOCTYPE html>")]


class TestJsonEndpoints:
    """Test consult, chat and health."""

    def test_consult(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/consult"
            assert request.headers[API_KEY_HEADER] == "k"
            return httpx.Response(200, json={"question": "Mấy màn?"})

        assert make_client(handler).consult("idea", "age", api_key="k") == "Mấy màn?"

    def test_consult_failure_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, json={"detail": "x"})

        with pytest.raises(httpx.HTTPStatusError):
            make_client(handler).consult("idea", "age", api_key="k")

    def test_chat(self):
        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            assert payload == {"code": "<html>", "message": "Sửa"}
            return httpx.Response(200, json={"text": "Đã sửa code!", "code": "<!DOCTYPE html>"})

        result = make_client(handler).chat("<html>", "Sửa", api_key="k")

        assert result == {"text": "Đã sửa code!", "code": "<!DOCTYPE html>"}

    def test_health_check(self):
        assert make_client(lambda request: httpx.Response(200, json={})).health_check() is True

    def test_health_check_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert make_client(handler).health_check() is False

    def test_consult_without_key(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert API_KEY_HEADER not in request.headers
            return httpx.Response(200, json={"question": "Mấy màn?"})

        assert make_client(handler).consult("idea", "age", api_key=None) == "Mấy màn?"
