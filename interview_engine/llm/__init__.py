"""LLM access for the interview engine."""

from interview_engine.llm.exceptions import (
    LLMConfigError,
    LLMError,
    LLMParseError,
    LLMProviderError,
    LLMTimeoutError,
)

__all__ = [
    "LLMError",
    "LLMProviderError",
    "LLMTimeoutError",
    "LLMParseError",
    "LLMConfigError",
]
