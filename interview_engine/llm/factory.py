"""
LLM client factory - creates provider clients from configuration.
"""

import logging
from enum import Enum

from interview_engine.config.settings import LLMSettings, TranscriptionSettings
from interview_engine.llm.anthropic_client import AnthropicClient
from interview_engine.llm.base_client import BaseLLMClient
from interview_engine.llm.exceptions import LLMConfigError
from interview_engine.llm.openai_client import OpenAIClient
from interview_engine.llm.transcription import OpenAITranscriptionClient, TranscriptionClient

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported chat-completion providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


CLIENT_MAP: dict[LLMProvider, type[BaseLLMClient]] = {
    LLMProvider.OPENAI: OpenAIClient,
    LLMProvider.ANTHROPIC: AnthropicClient,
}


def create_llm_client(settings: LLMSettings, api_key: str | None = None) -> BaseLLMClient:
    """
    Create a chat-completion client from settings.

    Args:
        settings: Provider settings
        api_key: Explicit key; read from settings.api_key_env when omitted

    Returns:
        Configured LLM client instance

    Raises:
        LLMConfigError: Unknown provider or missing API key
    """
    try:
        provider = LLMProvider(settings.provider.lower())
    except ValueError as e:
        raise LLMConfigError(
            f"Unsupported LLM provider: {settings.provider}. "
            f"Supported: {[p.value for p in LLMProvider]}"
        ) from e

    api_key = api_key or settings.api_key()
    if not api_key:
        raise LLMConfigError(f"API key not set: {settings.api_key_env}")

    kwargs = {
        "api_key": api_key,
        "model": settings.model,
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
        "timeout": settings.timeout_seconds,
    }
    if provider is LLMProvider.OPENAI and settings.base_url:
        kwargs["base_url"] = settings.base_url

    client = CLIENT_MAP[provider](**kwargs)
    logger.info(f"Created {provider.value} client with model: {settings.model}")
    return client


def create_transcription_client(
    settings: TranscriptionSettings, api_key: str | None = None
) -> TranscriptionClient | None:
    """
    Create the audio transcription client, or None when it is disabled or has no key.

    Args:
        settings: Transcription settings
        api_key: Explicit key; read from settings.api_key_env when omitted

    Returns:
        Transcription client or None
    """
    if not settings.enabled:
        return None

    api_key = api_key or settings.api_key()
    if not api_key:
        logger.warning(f"Transcription disabled: {settings.api_key_env} is not set")
        return None

    return OpenAITranscriptionClient(
        api_key=api_key,
        model=settings.model,
        timeout=settings.timeout_seconds,
    )
