"""
Custom exceptions for LLM module.
"""


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class LLMProviderError(LLMError):
    """Exception raised when a chat-completion or transcription provider fails."""

    pass


class LLMTimeoutError(LLMProviderError):
    """Exception raised when LLM request times out."""

    pass


class LLMParseError(LLMError):
    """Exception raised when an LLM reply is not the structured data we asked for."""

    pass


class LLMConfigError(LLMError):
    """Exception raised when LLM configuration is invalid."""

    pass
