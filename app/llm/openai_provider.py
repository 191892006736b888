"""
OpenAI provider implementation.
"""
import logging
from typing import Optional, Dict, Any
from openai import OpenAI, APIError

from app.core import config
from app.llm.provider import LLMProvider, LLMResponse, LLMProviderError

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI provider using official OpenAI SDK."""

    name = "openai"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or config.OPENAI_API_KEY
        if not self.api_key:
            raise LLMProviderError("OPENAI_API_KEY not configured")
        self.client = OpenAI(api_key=self.api_key)
        logger.info("OpenAI provider initialized")

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.4,
        json_mode: bool = False,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        model = model or config.OPENAI_FEEDBACK_MODEL
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=2000,
                **kwargs
            )
        except APIError as e:
            logger.error(f"OpenAI API error: {e}", exc_info=True)
            raise LLMProviderError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content or ""
        if not content:
            raise LLMProviderError("Empty response from AI")

        return LLMResponse(
            content=content,
            model=model,
            tokens_in=response.usage.prompt_tokens if response.usage else 0,
            tokens_out=response.usage.completion_tokens if response.usage else 0,
            metadata={"finish_reason": response.choices[0].finish_reason},
        )
