"""Chat edit chain: apply a free-text change request to the current game."""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from src.chains.assets import mask_embedded_payloads, unmask_payloads
from src.chains.code_extractor import clean_generated_code, is_html_document
from src.chains.request_builder import build_edit_prompt
from src.credentials import pick_credential
from src.llm import get_llm

logger = logging.getLogger(__name__)

EDIT_DONE_MESSAGE = "Đã sửa code!"


class EditResult(BaseModel):
    """Outcome of one chat edit."""

    text: str = Field(description="Tin nhắn trả lời trong khung chat")
    code: str | None = Field(default=None, description="Code HTML mới (nếu có)")


class CodeEditorChain:
    """Chain sending the current artifact plus a change request to the model.

    Embedded base64 payloads never reach the model: they are masked before
    the call and restored in the answer.
    """

    def __init__(self, llm: BaseChatModel | None = None):
        self.llm = llm
        self.parser = StrOutputParser()
        self.prompt = ChatPromptTemplate.from_messages([("human", "{prompt}")])

    def _build_chain(self, api_keys: list[str] | None):
        llm = self.llm or get_llm(api_key=pick_credential(api_keys or []))
        return self.prompt | llm | self.parser

    def _to_result(self, raw: str, mapping: dict[str, str]) -> EditResult:
        cleaned = clean_generated_code(raw)
        if is_html_document(cleaned):
            return EditResult(text=EDIT_DONE_MESSAGE, code=unmask_payloads(cleaned, mapping))
        return EditResult(text=unmask_payloads(raw, mapping).strip())

    def edit(self, code: str, message: str, api_keys: list[str] | None = None) -> EditResult:
        """Apply a change request.

        Args:
            code: Current HTML artifact.
            message: User's change request.
            api_keys: Keys to pick from (ignored when an llm was injected).

        Returns:
            EditResult with new code when the reply is a full document,
            otherwise just the conversational reply.
        """
        chain = self._build_chain(api_keys)
        masked, mapping = mask_embedded_payloads(code)
        raw = chain.invoke({"prompt": build_edit_prompt(masked, message)})
        return self._to_result(raw, mapping)

    async def aedit(
        self, code: str, message: str, api_keys: list[str] | None = None
    ) -> EditResult:
        """Async version of edit."""
        chain = self._build_chain(api_keys)
        masked, mapping = mask_embedded_payloads(code)
        logger.info(f"Chat edit with {len(mapping)} masked payload(s)")
        raw = await chain.ainvoke({"prompt": build_edit_prompt(masked, message)})
        return self._to_result(raw, mapping)
