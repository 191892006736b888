"""
LLM Provider interface for abstracting LLM implementations.
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass, field


@dataclass
class LLMResponse:
    """Standardized LLM response."""
    content: str
    model: str = ""
    tokens_in: int = 0
    tokens_out: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)


class LLMProviderError(RuntimeError):
    """Provider call failed or returned nothing usable."""


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name: str = "base"

    @abstractmethod
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.4,
        json_mode: bool = False,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        """
        Generate a single completion.

        Args:
            system_prompt: System instruction
            user_prompt: User turn content
            model: Model identifier (provider default when omitted)
            temperature: Sampling temperature
            json_mode: Ask the model for a JSON document
            response_schema: Optional schema the JSON must follow (providers that
                cannot enforce it ignore it)

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMProviderError: On API failure or empty output
        """
        raise NotImplementedError
