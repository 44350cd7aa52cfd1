"""Clarification chain: one design question before code generation."""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from src.chains.request_builder import build_consultation_prompt
from src.config import settings
from src.credentials import pick_credential
from src.llm import get_llm

logger = logging.getLogger(__name__)

FALLBACK_QUESTION = "Bạn muốn cách chơi cụ thể như thế nào?"


class ConsultationChain:
    """Chain asking the model for a single clarifying question."""

    def __init__(self, llm: BaseChatModel | None = None):
        """Initialize the consultation chain.

        Args:
            llm: Optional chat model. When omitted a Gemini model is created
                per call with a key picked from the caller's keys.
        """
        self.llm = llm
        self.parser = StrOutputParser()
        self.prompt = ChatPromptTemplate.from_messages([("human", "{prompt}")])

    def _build_chain(self, api_keys: list[str] | None):
        llm = self.llm or get_llm(
            api_key=pick_credential(api_keys or []),
            temperature=settings.consult_temperature,
        )
        return self.prompt | llm | self.parser

    def consult(self, idea: str, age_group: str, api_keys: list[str] | None = None) -> str:
        """Ask for one question about the game mechanics.

        Args:
            idea: Game idea.
            age_group: Target age group.
            api_keys: Keys to pick from (ignored when an llm was injected).

        Returns:
            The question text, or a generic question if the model said nothing.

        Raises:
            MissingCredentialError: If no key is available.
        """
        chain = self._build_chain(api_keys)
        question = chain.invoke({"prompt": build_consultation_prompt(idea, age_group)})
        return question.strip() or FALLBACK_QUESTION

    async def aconsult(
        self, idea: str, age_group: str, api_keys: list[str] | None = None
    ) -> str:
        """Async version of consult."""
        chain = self._build_chain(api_keys)
        question = await chain.ainvoke({"prompt": build_consultation_prompt(idea, age_group)})
        logger.info(f"Consultation question for '{idea[:40]}': {question.strip()[:80]}")
        return question.strip() or FALLBACK_QUESTION
