"""LLM factory for the Gemini chat model.

Every call gets its own model instance because the API key is picked per
call from the user's key list.
"""

from langchain_google_genai import ChatGoogleGenerativeAI

from src.config import settings


def get_llm(
    api_key: str,
    temperature: float | None = None,
    model: str | None = None,
) -> ChatGoogleGenerativeAI:
    """Get a Gemini chat model bound to one API key.

    Args:
        api_key: Gemini API key used as the bearer credential for this call.
        temperature: Override default temperature. If None, uses settings.llm_temperature.
        model: Override model name. If None, uses settings.llm_model.

    Returns:
        ChatGoogleGenerativeAI instance. Client-side retries are disabled;
        a failed call is reported, never retried.

    Examples:
        >>> llm = get_llm(api_key, temperature=settings.generation_temperature)
    """
    temp = temperature if temperature is not None else settings.llm_temperature

    return ChatGoogleGenerativeAI(
        model=model or settings.llm_model,
        google_api_key=api_key,
        temperature=temp,
        thinking_budget=settings.llm_thinking_budget,
        max_retries=0,
    )
