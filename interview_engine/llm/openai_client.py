"""
OpenAI chat-completion client implementation.
"""

import logging
import time

from openai import APITimeoutError, AsyncOpenAI

from interview_engine.llm.base_client import BaseLLMClient, LLMResponse
from interview_engine.llm.exceptions import LLMProviderError, LLMTimeoutError

logger = logging.getLogger(__name__)


class OpenAIClient(BaseLLMClient):
    """LLM client for the OpenAI (or any OpenAI-compatible) chat API."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: int,
        base_url: str | None = None,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            model: Model identifier (e.g., "gpt-4-turbo-preview")
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
            base_url: Optional base URL for OpenAI-compatible endpoints
        """
        super().__init__(api_key, model, temperature, max_tokens, timeout)
        self.base_url = base_url
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def generate_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Generate completion from OpenAI API.

        Args:
            messages: Chat messages in OpenAI format
            temperature: Optional temperature override
            max_tokens: Optional token limit override

        Returns:
            LLMResponse: Response with content and metadata

        Raises:
            LLMTimeoutError: Request exceeded the configured timeout
            LLMProviderError: OpenAI API error
        """
        start_time = time.time()
        temperature, max_tokens = self._resolve(temperature, max_tokens)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=self.timeout,
            )
        except APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI request timed out after {self.timeout}s") from e
        except Exception as e:
            raise LLMProviderError(f"OpenAI API error: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMProviderError("OpenAI API returned no choices")

        content = response.choices[0].message.content or ""
        tokens_used = response.usage.total_tokens if response.usage else 0

        return LLMResponse(
            content=content,
            tokens_used=tokens_used,
            latency_ms=latency_ms,
            model_used=self.model,
        )
