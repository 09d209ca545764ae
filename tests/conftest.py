"""
Shared fixtures and test doubles.
"""

import asyncio
import json
from collections.abc import Callable

import pytest

from interview_engine.events import EventChannel
from interview_engine.llm.base_client import BaseLLMClient, LLMResponse
from interview_engine.llm.exceptions import LLMProviderError
from interview_engine.llm.gateway import LLMGateway
from interview_engine.llm.prompts import (
    ADAPT_SYSTEM_PROMPT,
    QUESTION_SYSTEM_PROMPT,
    SENTIMENT_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
)
from interview_engine.llm.request_queue import RequestQueue
from interview_engine.speech.engines import RecognitionEngine, SynthesisEngine, Utterance, Voice

# 60000 calls/minute -> 1ms between dispatches
FAST_RATE_LIMIT = 60000


class ScriptedLLMClient(BaseLLMClient):
    """Chat client whose replies come from a function of the messages."""

    provider_name = "scripted"

    def __init__(self, responder: Callable[[list[dict[str, str]]], str]):
        super().__init__(api_key="test-key", model="scripted", temperature=0.7, max_tokens=100, timeout=5)
        self.responder = responder
        self.calls: list[list[dict[str, str]]] = []

    async def generate_completion(self, messages, temperature=None, max_tokens=None):
        self.calls.append(messages)
        return LLMResponse(content=self.responder(messages), model_used=self.model)

    def calls_for(self, system_prompt: str) -> list[list[dict[str, str]]]:
        return [m for m in self.calls if m[0]["content"] == system_prompt]


def failing_responder(messages):
    raise LLMProviderError("provider unavailable")


def interview_responder(messages):
    """Well-behaved provider for every interview task."""
    system = messages[0]["content"]
    if system == QUESTION_SYSTEM_PROMPT:
        return json.dumps(
            {
                "questions": [
                    {
                        "text": f"Generated question {i + 1}?",
                        "followup": "Tell me more?",
                        "category": "problem",
                        "expectedInsight": "insight",
                        "adaptability": 0.5,
                    }
                    for i in range(5)
                ]
            }
        )
    if system == SENTIMENT_SYSTEM_PROMPT:
        return json.dumps(
            {
                "sentiment": "positive",
                "engagementLevel": "high",
                "engagementScore": 8,
                "characteristics": ["detailed"],
                "recommendations": ["dig deeper"],
            }
        )
    if system == ADAPT_SYSTEM_PROMPT:
        return '"So, building on that, what came next?"'
    if system == SUMMARY_SYSTEM_PROMPT:
        return json.dumps(
            {
                "conclusion": "Great interview.",
                "key_points": ["point"],
                "insights": ["insight"],
                "next_steps": ["step"],
            }
        )
    raise AssertionError(f"Unexpected prompt: {system[:40]}")


class FakeSynthesisEngine(SynthesisEngine):
    """Finishes every utterance on the next loop iteration."""

    def __init__(self, voices: list[Voice] | None = None, auto_finish: bool = True):
        self.voices = voices if voices is not None else [Voice("Test Voice", "en-US")]
        self.auto_finish = auto_finish
        self.spoken: list[Utterance] = []
        self.cancel_count = 0

    def get_voices(self):
        return list(self.voices)

    def speak(self, utterance: Utterance) -> None:
        self.spoken.append(utterance)
        if self.auto_finish:
            loop = asyncio.get_running_loop()
            loop.call_soon(utterance.on_start)
            loop.call_soon(utterance.on_end)

    def cancel(self) -> None:
        self.cancel_count += 1


class FakeRecognitionEngine(RecognitionEngine):
    """
    Delivers one scripted answer per listening session.

    ``stop()`` ends the session on the next loop iteration, like a real engine.
    """

    def __init__(self, answers: list[str] | None = None):
        super().__init__()
        self.answers = list(answers or [])
        self.start_count = 0
        self.stop_count = 0
        self.running = False

    def start(self) -> None:
        self.start_count += 1
        self.running = True
        if self.answers:
            answer = self.answers.pop(0)
            asyncio.get_running_loop().call_soon(self._emit_result, answer, True)

    def stop(self) -> None:
        self.stop_count += 1
        asyncio.get_running_loop().call_soon(self._finish)

    def _finish(self) -> None:
        self.running = False
        self._emit_end()


class RecordingChannel(EventChannel):
    """EventChannel that keeps every emitted event."""

    def __init__(self, session_id: str = "test"):
        super().__init__(session_id)
        self.events = []
        self.subscribe_all(self.events.append)

    def of_type(self, event_type):
        return [e for e in self.events if e.event_type == event_type]


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def queue():
    return RequestQueue(rate_limit=FAST_RATE_LIMIT)


@pytest.fixture
def scripted_client():
    return ScriptedLLMClient(interview_responder)


@pytest.fixture
def failing_client():
    return ScriptedLLMClient(failing_responder)


@pytest.fixture
def gateway(scripted_client, queue):
    return LLMGateway(scripted_client, queue)


@pytest.fixture
def failing_gateway(failing_client, queue):
    return LLMGateway(failing_client, queue)
