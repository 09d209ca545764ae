"""
Audio transcription providers.
"""

import logging
import time
from abc import ABC, abstractmethod

from openai import APITimeoutError, AsyncOpenAI

from interview_engine.llm.exceptions import LLMProviderError, LLMTimeoutError

logger = logging.getLogger(__name__)


class TranscriptionClient(ABC):
    """Abstract base class for speech-to-text providers."""

    @abstractmethod
    async def transcribe(self, audio: bytes, filename: str = "answer.webm") -> str:
        """
        Transcribe recorded audio to text.

        Args:
            audio: Encoded audio bytes
            filename: Name hinting the container format to the provider

        Returns:
            Transcribed text

        Raises:
            LLMProviderError: Provider API error
        """
        pass


class OpenAITranscriptionClient(TranscriptionClient):
    """Whisper transcription through the OpenAI audio API."""

    def __init__(self, api_key: str, model: str = "whisper-1", timeout: int = 60):
        self.model = model
        self.timeout = timeout
        self.client = AsyncOpenAI(api_key=api_key)

    async def transcribe(self, audio: bytes, filename: str = "answer.webm") -> str:
        start_time = time.time()

        try:
            response = await self.client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio),
                timeout=self.timeout,
            )
        except APITimeoutError as e:
            raise LLMTimeoutError(f"Transcription timed out after {self.timeout}s") from e
        except Exception as e:
            raise LLMProviderError(f"OpenAI transcription error: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Transcribed {len(audio)} bytes in {latency_ms}ms")

        return response.text
