"""
Provider selection for AI features.
"""
import logging
from typing import Optional

from app.core import config
from app.llm.provider import LLMProvider, LLMProviderError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("gemini", "openai")


def get_llm_provider(name: Optional[str] = None) -> LLMProvider:
    """
    Build the configured provider.

    Args:
        name: Provider override; defaults to LLM_PROVIDER

    Raises:
        LLMProviderError: Unknown provider or missing API key
    """
    name = (name or config.LLM_PROVIDER or "gemini").lower()

    if name == "gemini":
        from app.llm.gemini_provider import GeminiProvider
        return GeminiProvider()
    if name == "openai":
        from app.llm.openai_provider import OpenAIProvider
        return OpenAIProvider()

    logger.error(f"Unsupported LLM provider: {name}")
    raise LLMProviderError(f"Unsupported LLM provider: {name}. Use one of {', '.join(SUPPORTED_PROVIDERS)}")
