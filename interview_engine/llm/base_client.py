"""
Base LLM client with async chat-completion interface.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM API."""

    content: str
    tokens_used: int = 0
    latency_ms: int = 0
    model_used: str = ""


class BaseLLMClient(ABC):
    """Abstract base class for chat-completion clients."""

    provider_name = "base"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: int,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key for the provider
            model: Model identifier
            temperature: Default sampling temperature (0.0-2.0)
            max_tokens: Default maximum tokens to generate
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @abstractmethod
    async def generate_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Generate completion from LLM.

        Args:
            messages: Chat messages in OpenAI format
            temperature: Per-call override of the default temperature
            max_tokens: Per-call override of the default token limit

        Returns:
            LLMResponse: Response with content and metadata

        Raises:
            LLMProviderError: Provider API error
        """
        pass

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Run a single system + user prompt exchange.

        Args:
            system_prompt: Instructions for the model
            user_prompt: Task payload
            temperature: Optional temperature override
            max_tokens: Optional token limit override

        Returns:
            LLMResponse: Response from LLM
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        response = await self.generate_completion(messages, temperature, max_tokens)

        logger.info(
            f"{self.provider_name} call succeeded in {response.latency_ms}ms, "
            f"{response.tokens_used} tokens"
        )

        return response

    def _resolve(self, temperature: float | None, max_tokens: int | None) -> tuple[float, int]:
        """Fill per-call overrides with client defaults."""
        return (
            self.temperature if temperature is None else temperature,
            self.max_tokens if max_tokens is None else max_tokens,
        )
