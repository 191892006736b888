"""
Google Gemini provider implementation (google-genai SDK).
"""
import logging
from typing import Optional, Dict, Any
import httpx
from google import genai
from google.genai import types, errors

from app.core import config
from app.llm.provider import LLMProvider, LLMResponse, LLMProviderError

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Gemini provider; supports structured JSON output through response_schema."""

    name = "gemini"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or config.GEMINI_API_KEY
        if not self.api_key:
            raise LLMProviderError("Gemini API Key is missing")
        self.client = genai.Client(api_key=self.api_key)
        logger.info("Gemini provider initialized")

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.4,
        json_mode: bool = False,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        model = model or config.GEMINI_FEEDBACK_MODEL
        generation_config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=temperature,
            response_mime_type="application/json" if json_mode else None,
            response_schema=response_schema if json_mode else None,
        )

        try:
            response = self.client.models.generate_content(
                model=model,
                contents=[types.Content(role="user", parts=[types.Part(text=user_prompt)])],
                config=generation_config,
            )
        except errors.APIError as e:
            logger.error(f"Gemini API error: {e}", exc_info=True)
            raise LLMProviderError(f"Gemini API error: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini transport error: {e}", exc_info=True)
            raise LLMProviderError(f"Gemini request failed: {e}") from e

        text = response.text
        if not text:
            raise LLMProviderError("Empty response from AI")

        usage = response.usage_metadata
        return LLMResponse(
            content=text,
            model=model,
            tokens_in=(usage.prompt_token_count or 0) if usage else 0,
            tokens_out=(usage.candidates_token_count or 0) if usage else 0,
        )
