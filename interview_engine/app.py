"""
Session assembly.

Everything an interview needs is built per session and passed in explicitly;
nothing is shared through module-level state.
"""

import logging
from dataclasses import dataclass
from typing import Any

from interview_engine.config.settings import EngineConfig, PersistenceSettings
from interview_engine.events import EventChannel
from interview_engine.interview.flow import InterviewFlow
from interview_engine.interview.orchestrator import InterviewOrchestrator
from interview_engine.llm.base_client import BaseLLMClient
from interview_engine.llm.factory import create_llm_client, create_transcription_client
from interview_engine.llm.gateway import LLMGateway
from interview_engine.llm.request_queue import RequestQueue
from interview_engine.llm.transcription import TranscriptionClient
from interview_engine.speech.engines import RecognitionEngine, SynthesisEngine
from interview_engine.speech.speech_io import SpeechIO
from interview_engine.storage.session_store import (
    InMemorySessionStore,
    JsonFileSessionStore,
    SessionStore,
)
from interview_engine.utils.logger import InterviewLogger

logger = logging.getLogger(__name__)


@dataclass
class InterviewSessionRuntime:
    """The wired components of one interview session."""

    session_id: str
    channel: EventChannel
    queue: RequestQueue
    gateway: LLMGateway
    speech: SpeechIO
    flow: InterviewFlow
    orchestrator: InterviewOrchestrator

    async def close(self) -> None:
        await self.orchestrator.stop()
        await self.flow.drain_persistence()
        await self.queue.aclose()


def create_session_store(settings: PersistenceSettings) -> SessionStore:
    if settings.backend == "memory":
        return InMemorySessionStore()
    return JsonFileSessionStore(settings.directory)


def build_session(
    config: EngineConfig,
    session_id: str,
    context: dict[str, Any] | None = None,
    recognition: RecognitionEngine | None = None,
    synthesis: SynthesisEngine | None = None,
    client: BaseLLMClient | None = None,
    transcription_client: TranscriptionClient | None = None,
    store: SessionStore | None = None,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> InterviewSessionRuntime:
    """
    Build all components for one interview session.

    Args:
        config: Engine configuration
        session_id: Session identifier
        context: Participant input from earlier workshop sections
        recognition: Speech-to-text engine (None = unsupported)
        synthesis: Text-to-speech engine (None = unsupported)
        client: Chat-completion client; created from config when omitted
        transcription_client: Speech-to-text provider; created from config when omitted
        store: Session store; created from config when omitted
        log_to_file: Write the session log file
        log_to_console: Echo the session log to the console

    Returns:
        InterviewSessionRuntime

    Raises:
        LLMConfigError: No client given and none can be created from config
    """
    if client is None:
        client = create_llm_client(config.llm)
    if transcription_client is None:
        transcription_client = create_transcription_client(config.transcription)
    if store is None:
        store = create_session_store(config.persistence)

    channel = EventChannel(session_id)
    queue = RequestQueue(rate_limit=config.llm.rate_limits.requests_per_minute)
    gateway = LLMGateway(
        client,
        queue,
        transcription_client=transcription_client,
        question_count=config.question_count,
    )
    speech = SpeechIO(
        channel,
        recognition=recognition,
        synthesis=synthesis,
        voice_settings=config.voice,
    )
    flow = InterviewFlow(
        session_id,
        gateway,
        store,
        channel,
        context=context,
        max_attempts=config.persistence.max_attempts,
        retry_delay=config.persistence.retry_delay_seconds,
        interview_logger=InterviewLogger(
            session_id, log_to_file=log_to_file, log_to_console=log_to_console
        ),
    )
    orchestrator = InterviewOrchestrator(
        flow,
        speech,
        channel,
        question_delay=config.timing.question_delay,
        settle_delay=config.timing.settle_delay,
        end_of_turn_silence=config.timing.end_of_turn_silence,
    )

    logger.info(f"Built interview session {session_id} ({client.provider_name}/{client.model})")

    return InterviewSessionRuntime(
        session_id=session_id,
        channel=channel,
        queue=queue,
        gateway=gateway,
        speech=speech,
        flow=flow,
        orchestrator=orchestrator,
    )
