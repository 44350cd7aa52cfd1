"""Session controller owning all per-browser-session state.

One ``GameSession`` lives in the UI session. It holds the generation state,
the chat history, the pending request during consultation and the user's
API keys, and drives the clarify -> generate flow against the engine.
"""

import logging
from collections.abc import Callable

import httpx

from src.chains.request_builder import DEFAULT_CLARIFICATION, GenerationRequest
from src.credentials import MISSING_KEY_MESSAGE, pick_credential
from src.ui.api_client import APIClient, CodeChunk, StreamResult
from src.ui.state import ChatMessage, GenerationState, GenerationStatus

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Xin chào thầy cô! Tôi là trợ lý sẽ giúp thầy cô chỉnh sửa game cho phù hợp. "
    "Cứ nhập yêu cầu, tôi sẽ sửa code ngay!"
)
NO_GAME_MESSAGE = "Bạn hãy tạo một trò chơi trước, sau đó tôi sẽ giúp bạn chỉnh sửa nó nhé!"
CHAT_ERROR_MESSAGE = "Xin lỗi, có lỗi xảy ra. Vui lòng kiểm tra lại kết nối mạng hoặc API Key."
GENERATION_ERROR_MESSAGE = "Đã có lỗi xảy ra khi tạo game."


class GameSession:
    """Top-level controller for one user session."""

    def __init__(
        self,
        client: APIClient,
        api_keys: list[str] | None = None,
        on_state_change: Callable[[GenerationState], None] | None = None,
    ):
        """Initialize the session.

        Args:
            client: Engine client (anything with consult/generate_stream/chat).
            api_keys: User's Gemini keys; one is picked at random per call.
                With none, requests go without a key header and the engine
                falls back to its own configured keys.
            on_state_change: Called with every new state value.
        """
        self.client = client
        self.api_keys: list[str] = []
        self.set_api_keys(api_keys or [])
        self.on_state_change = on_state_change
        self.state = GenerationState()
        self.pending_request: GenerationRequest | None = None
        self.proactive_question: str | None = None
        self.messages: list[ChatMessage] = [ChatMessage(role="assistant", text=WELCOME_MESSAGE)]

    @property
    def is_busy(self) -> bool:
        return self.state.is_busy

    @property
    def is_consulting(self) -> bool:
        return self.state.status == GenerationStatus.CONSULTING

    def _set_state(
        self,
        status: GenerationStatus,
        code: str = "",
        error: str | None = None,
    ) -> None:
        self.state = GenerationState(status=status, code=code, error=error)
        if self.on_state_change:
            self.on_state_change(self.state)

    def _add_message(self, role: str, text: str) -> ChatMessage:
        message = ChatMessage(role=role, text=text)
        self.messages.append(message)
        return message

    def set_api_keys(self, api_keys: list[str]) -> None:
        self.api_keys = [k.strip() for k in api_keys if k and k.strip()]

    def _pick_key(self) -> str | None:
        """One of the user's keys, or None to let the engine use its own."""
        if not self.api_keys:
            return None
        return pick_credential(self.api_keys)

    def submit(self, request: GenerationRequest) -> bool:
        """Start a new game: ask a clarification question first.

        Consultation is best effort. If it fails for any reason, generation
        starts right away with a default clarification.

        Returns:
            False if the request was refused (flow already running or no idea).
        """
        if self.is_busy:
            logger.warning("Submit ignored: a generation flow is already running")
            return False
        if not request.has_content():
            return False

        self.pending_request = request
        self.proactive_question = None
        self._set_state(GenerationStatus.LOADING)

        try:
            api_key = self._pick_key()
            question = self.client.consult(
                request.effective_idea, request.age_group, api_key=api_key
            )
        except Exception as e:
            logger.warning(f"Consultation failed, generating directly: {e}")
            self.pending_request = None
            self.start_generation(request, DEFAULT_CLARIFICATION)
            return True

        self.proactive_question = question
        self._add_message("assistant", question)
        self._set_state(GenerationStatus.CONSULTING)
        return True

    def reply(self, text: str) -> bool:
        """Answer the clarification question and start generation."""
        if not self.is_consulting or self.pending_request is None:
            return False

        self._add_message("user", text)
        request = self.pending_request
        self.pending_request = None
        self.proactive_question = None
        self.start_generation(request, text)
        return True

    def start_generation(self, request: GenerationRequest, clarification: str) -> None:
        """Stream the game code; ends in success or error."""
        request = request.model_copy(update={"clarification": clarification})
        self._set_state(GenerationStatus.LOADING)

        try:
            api_key = self._pick_key()
            code = ""
            for update in self.client.generate_stream(request, api_key=api_key):
                if isinstance(update, CodeChunk):
                    code += update.text
                    self._set_state(GenerationStatus.STREAMING, code=code)
                elif isinstance(update, StreamResult):
                    if update.success and update.code is not None:
                        self._set_state(GenerationStatus.SUCCESS, code=update.code)
                    else:
                        self._set_state(
                            GenerationStatus.ERROR,
                            error=update.error or GENERATION_ERROR_MESSAGE,
                        )
                    return
            self._set_state(GenerationStatus.ERROR, error=GENERATION_ERROR_MESSAGE)
        except Exception:
            logger.exception("Game generation failed")
            self._set_state(GenerationStatus.ERROR, error=GENERATION_ERROR_MESSAGE)

    def update_code(self, code: str) -> None:
        """Replace the displayed artifact wholesale."""
        self._set_state(GenerationStatus.SUCCESS, code=code)

    def send_chat(self, text: str) -> None:
        """Handle a chat panel message.

        During consultation the message answers the question. Otherwise it is
        an edit request for the current game; failures become an apology and
        leave the game untouched.
        """
        text = text.strip()
        if not text:
            return

        if self.is_consulting:
            self.reply(text)
            return

        self._add_message("user", text)

        if not self.state.has_game:
            self._add_message("assistant", NO_GAME_MESSAGE)
            return

        try:
            api_key = self._pick_key()
            result = self.client.chat(self.state.code, text, api_key=api_key)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                self._add_message("assistant", MISSING_KEY_MESSAGE)
                return
            logger.exception("Chat edit failed")
            self._add_message("assistant", CHAT_ERROR_MESSAGE)
            return
        except Exception:
            logger.exception("Chat edit failed")
            self._add_message("assistant", CHAT_ERROR_MESSAGE)
            return

        if result.get("code"):
            self.update_code(result["code"])
        self._add_message("assistant", result.get("text") or "")
