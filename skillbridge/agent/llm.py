"""LLM provider configuration."""

from functools import lru_cache

from langchain_openai import ChatOpenAI

from skillbridge.core.config import get_settings
from skillbridge.core.logging import get_logger

logger = get_logger(__name__)


@lru_cache
def get_generation_llm() -> ChatOpenAI:
    """Get the LLM used for roadmap and quiz generation (JSON object responses)."""
    settings = get_settings()

    kwargs: dict = {
        "model": settings.OPENAI_MODEL,
        "temperature": settings.OPENAI_TEMPERATURE,
        "timeout": settings.OPENAI_TIMEOUT_SECONDS,
        "max_retries": settings.OPENAI_MAX_RETRIES,
        "model_kwargs": {"response_format": {"type": "json_object"}},
    }

    if settings.OPENAI_API_KEY:
        kwargs["api_key"] = settings.OPENAI_API_KEY
    if settings.OPENAI_API_BASE_URL:
        kwargs["base_url"] = settings.OPENAI_API_BASE_URL

    logger.info("Initializing generation LLM", model=settings.OPENAI_MODEL)
    return ChatOpenAI(**kwargs)
