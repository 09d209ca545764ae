"""
Anthropic (Claude) LLM client implementation.
"""

import logging
import time

from anthropic import APITimeoutError, AsyncAnthropic

from interview_engine.llm.base_client import BaseLLMClient, LLMResponse
from interview_engine.llm.exceptions import LLMProviderError, LLMTimeoutError

logger = logging.getLogger(__name__)


class AnthropicClient(BaseLLMClient):
    """LLM client for Anthropic Claude API."""

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: int,
    ):
        """
        Initialize Anthropic client.

        Args:
            api_key: Anthropic API key
            model: Model identifier (e.g., "claude-sonnet-4-5")
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
        """
        super().__init__(api_key, model, temperature, max_tokens, timeout)
        self.client = AsyncAnthropic(api_key=api_key)

    async def generate_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Generate completion from Anthropic API.

        Args:
            messages: Chat messages in OpenAI format
            temperature: Optional temperature override
            max_tokens: Optional token limit override

        Returns:
            LLMResponse: Response with content and metadata

        Raises:
            LLMTimeoutError: Request exceeded the configured timeout
            LLMProviderError: Anthropic API error
        """
        start_time = time.time()
        temperature, max_tokens = self._resolve(temperature, max_tokens)

        # Anthropic takes the system prompt as a separate argument
        system_msg = None
        chat_messages = []

        for msg in messages:
            if msg["role"] == "system":
                system_msg = msg["content"]
            else:
                chat_messages.append({"role": msg["role"], "content": msg["content"]})

        kwargs = {
            "model": self.model,
            "messages": chat_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": self.timeout,
        }

        if system_msg:
            kwargs["system"] = system_msg

        try:
            response = await self.client.messages.create(**kwargs)
        except APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic request timed out after {self.timeout}s") from e
        except Exception as e:
            raise LLMProviderError(f"Anthropic API error: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        content = "".join(block.text for block in response.content if block.type == "text")
        tokens_used = response.usage.input_tokens + response.usage.output_tokens

        return LLMResponse(
            content=content,
            tokens_used=tokens_used,
            latency_ms=latency_ms,
            model_used=self.model,
        )
