"""Streaming HTML5 game generation chain."""

import asyncio
import logging
from collections.abc import Callable

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from src.chains.assets import AudioAssets, audio_sources, restore_audio_tokens
from src.chains.code_extractor import STREAM_BANNER, clean_generated_code
from src.chains.request_builder import GenerationRequest, build_generation_prompt
from src.config import settings
from src.credentials import pick_credential
from src.llm import get_llm

logger = logging.getLogger(__name__)


class GameGeneratorChain:
    """Chain streaming a single-file HTML game from a GenerationRequest.

    Partial output is reported through ``on_update`` as the full text so far,
    so observers always see a growing prefix. Extraction and audio token
    restoration run once, after the stream ends.
    """

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        timeout_seconds: float | None = None,
    ):
        """Initialize the generator chain.

        Args:
            llm: Optional chat model. When omitted a Gemini model is created
                per call with a key picked from the caller's keys.
            timeout_seconds: Deadline for the whole stream. Defaults to
                settings.generation_timeout_seconds.
        """
        self.llm = llm
        self.timeout_seconds = timeout_seconds or settings.generation_timeout_seconds
        self.parser = StrOutputParser()
        self.prompt = ChatPromptTemplate.from_messages([("human", "{prompt}")])

    def _build_chain(self, api_keys: list[str] | None):
        llm = self.llm or get_llm(
            api_key=pick_credential(api_keys or []),
            temperature=settings.generation_temperature,
        )
        return self.prompt | llm | self.parser

    @staticmethod
    def finalize(raw_text: str, audio: AudioAssets) -> str:
        """Turn accumulated stream text into the final artifact."""
        return restore_audio_tokens(clean_generated_code(raw_text), audio)

    async def agenerate(
        self,
        request: GenerationRequest,
        api_keys: list[str] | None = None,
        on_update: Callable[[str], None] | None = None,
    ) -> str:
        """Stream game code and return the cleaned artifact.

        Args:
            request: Game parameters, including optional audio payloads.
            api_keys: Keys to pick from (ignored when an llm was injected).
            on_update: Called with the accumulated raw text after every chunk.

        Returns:
            Final HTML with real audio payloads embedded.

        Raises:
            MissingCredentialError: If no key is available (before any call).
            TimeoutError: If the stream exceeds the deadline.
        """
        chain = self._build_chain(api_keys)
        prompt = build_generation_prompt(request, audio_sources(request.audio))

        full_text = STREAM_BANNER
        if on_update:
            on_update(full_text)

        async def _consume() -> str:
            nonlocal full_text
            async for chunk in chain.astream({"prompt": prompt}):
                if not chunk:
                    continue
                full_text += chunk
                if on_update:
                    on_update(full_text)
            return full_text

        try:
            raw_text = await asyncio.wait_for(_consume(), timeout=self.timeout_seconds)
        except TimeoutError:
            logger.error(f"Game generation exceeded {self.timeout_seconds}s deadline")
            raise

        logger.info(f"Game generation finished ({len(raw_text)} raw chars)")
        return self.finalize(raw_text, request.audio)
