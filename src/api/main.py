"""FastAPI engine for educational game generation.

Stateless boundary around the remote model: clarification questions,
streaming code generation over SSE, and chat edits.
"""

import asyncio
import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from sse_starlette.sse import EventSourceResponse
from starlette.status import HTTP_401_UNAUTHORIZED

from src.api.models import ChatRequest, ChatResponse, ConsultRequest, ConsultResponse, ErrorResponse
from src.api.sse_models import ChunkEvent, CompleteEvent, ErrorEvent, SSEEventType
from src.chains.code_editor import CodeEditorChain
from src.chains.consultation import ConsultationChain
from src.chains.game_generator import GameGeneratorChain
from src.chains.request_builder import GenerationRequest
from src.config import get_settings
from src.credentials import MISSING_KEY_MESSAGE, MissingCredentialError, parse_credentials

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-User-API-Key"

GENERATION_ERROR_MESSAGE = "Đã có lỗi xảy ra khi tạo game. Vui lòng thử lại."
TIMEOUT_ERROR_MESSAGE = "Quá thời gian chờ tạo game. Vui lòng thử lại."
CONSULT_ERROR_MESSAGE = "Không thể tư vấn ý tưởng lúc này."
EDIT_ERROR_MESSAGE = "Lỗi khi sửa code."
EMPTY_IDEA_MESSAGE = "Vui lòng nhập ý tưởng trò chơi hoặc đính kèm tài liệu."

# Global instances (initialized on startup)
consultant: ConsultationChain | None = None
generator: GameGeneratorChain | None = None
editor: CodeEditorChain | None = None

_background_tasks: set[asyncio.Task] = set()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize and cleanup resources."""
    global consultant, generator, editor

    logger.info("Initializing game engine chains...")
    consultant = ConsultationChain()
    generator = GameGeneratorChain()
    editor = CodeEditorChain()

    yield

    logger.info("Shutting down game engine")


app = FastAPI(
    title="Educational Game Studio Engine",
    description="Gemini-backed generation of single-file HTML5 educational games",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def resolve_api_keys(request: Request) -> list[str]:
    """Keys for this call: the user's header first, then the server's own.

    Raises:
        HTTPException: 401 with a settings hint when no key is available.
    """
    keys = parse_credentials(request.headers.get(API_KEY_HEADER))
    if not keys:
        keys = get_settings().gemini_api_keys
    if not keys:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=MISSING_KEY_MESSAGE)
    return keys


def _friendly_generation_error(error: Exception) -> str:
    if isinstance(error, MissingCredentialError):
        return str(error)
    if isinstance(error, TimeoutError):
        return TIMEOUT_ERROR_MESSAGE
    return GENERATION_ERROR_MESSAGE


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@app.post(
    "/consult",
    response_model=ConsultResponse,
    responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def consult(request: Request, body: ConsultRequest) -> ConsultResponse:
    """Ask the model for one clarifying question about the game idea.

    Args:
        request: FastAPI request (carries the user's API key header).
        body: Idea and age group.

    Returns:
        The clarification question.
    """
    if consultant is None:
        raise HTTPException(status_code=500, detail="Consultation chain not initialized")

    api_keys = resolve_api_keys(request)
    try:
        question = await consultant.aconsult(body.idea, body.age_group, api_keys=api_keys)
    except Exception as e:
        logger.exception("Error asking clarification question")
        raise HTTPException(status_code=502, detail=CONSULT_ERROR_MESSAGE) from e
    return ConsultResponse(question=question)


@app.post("/generate/stream")
async def generate_stream(
    request: Request,
    generation_request: GenerationRequest,
) -> EventSourceResponse:
    """Stream game code as it is generated.

    Sends one ``chunk`` event per text delta (in arrival order), then a
    ``complete`` event with the cleaned artifact, or an ``error`` event.

    Args:
        request: FastAPI request for disconnect detection and API key header.
        generation_request: Game parameters.

    Returns:
        EventSourceResponse streaming chunk and result events.
    """
    if generator is None:
        raise HTTPException(status_code=500, detail="Generator not initialized")

    if not generation_request.has_content():
        raise HTTPException(status_code=422, detail=EMPTY_IDEA_MESSAGE)

    api_keys = resolve_api_keys(request)

    async def event_generator() -> AsyncGenerator[dict[str, Any], None]:
        queue: asyncio.Queue[ChunkEvent | CompleteEvent | ErrorEvent | None] = asyncio.Queue()
        sent_length = 0

        def on_update(full_text: str) -> None:
            nonlocal sent_length
            delta = full_text[sent_length:]
            sent_length = len(full_text)
            if delta:
                queue.put_nowait(ChunkEvent(text=delta))

        async def run_generation() -> None:
            try:
                code = await generator.agenerate(
                    generation_request,
                    api_keys=api_keys,
                    on_update=on_update,
                )
                queue.put_nowait(CompleteEvent(code=code))
            except Exception as e:
                logger.exception("Error in streaming generation")
                queue.put_nowait(ErrorEvent(error=_friendly_generation_error(e)))
            finally:
                queue.put_nowait(None)

        # Runs to completion even if the client goes away
        task = asyncio.create_task(run_generation())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

        while True:
            if await request.is_disconnected():
                logger.info("Client disconnected from generation stream")
                break

            try:
                event = await asyncio.wait_for(queue.get(), timeout=1.0)
            except TimeoutError:
                continue

            if event is None:
                break

            if isinstance(event, ChunkEvent):
                event_type = SSEEventType.CHUNK
            elif isinstance(event, CompleteEvent):
                event_type = SSEEventType.COMPLETE
            else:
                event_type = SSEEventType.ERROR

            yield {"event": event_type.value, "data": event.model_dump_json()}

    return EventSourceResponse(event_generator())


@app.post(
    "/chat",
    response_model=ChatResponse,
    responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def chat_edit(request: Request, body: ChatRequest) -> ChatResponse:
    """Apply a change request to the current game code.

    Args:
        request: FastAPI request (carries the user's API key header).
        body: Current code and the change request.

    Returns:
        Reply text, plus new code when the model returned a full document.
    """
    if editor is None:
        raise HTTPException(status_code=500, detail="Editor chain not initialized")

    api_keys = resolve_api_keys(request)
    try:
        result = await editor.aedit(body.code, body.message, api_keys=api_keys)
    except Exception as e:
        logger.exception("Error applying chat edit")
        raise HTTPException(status_code=502, detail=EDIT_ERROR_MESSAGE) from e
    return ChatResponse(text=result.text, code=result.code)
