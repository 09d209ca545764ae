"""
Interview orchestrator - turn-taking between the interviewer's voice and the
participant's answers.

Listens to the session EventChannel: new questions are spoken, the end of
speech opens the microphone after a settle delay, and the end of the
participant's turn forwards the transcript to the flow. Also derives the
avatar's emotion label from what is happening.
"""

import asyncio
import logging

from interview_engine.core.models import InterviewPhase, Question
from interview_engine.events import EngineEvent, EventChannel, EventType
from interview_engine.interview.flow import InterviewFlow
from interview_engine.speech.speech_io import SpeechIO, UtteranceHandle

logger = logging.getLogger(__name__)

COMPLETION_MESSAGE = (
    "Thank you for completing this interview. Your responses have been recorded."
)

PHASE_EMOTIONS = {
    InterviewPhase.IDLE: "neutral",
    InterviewPhase.PREPARING: "thinking",
    InterviewPhase.PROCESSING: "thinking",
    InterviewPhase.COMPLETE: "happy",
}


class InterviewOrchestrator:
    """Wires InterviewFlow events to SpeechIO calls for one session."""

    def __init__(
        self,
        flow: InterviewFlow,
        speech: SpeechIO,
        channel: EventChannel,
        question_delay: float = 0.5,
        settle_delay: float = 0.5,
        end_of_turn_silence: float | None = 2.0,
        adapt_questions: bool = False,
        completion_message: str = COMPLETION_MESSAGE,
    ):
        """
        Initialize orchestrator.

        Args:
            flow: Interview state machine
            speech: Speech input/output
            channel: Event channel shared by flow and speech
            question_delay: Pause before speaking a new question, in seconds
            settle_delay: Pause between end of speech and opening the microphone
            end_of_turn_silence: Seconds without new transcript that end an
                answer; None leaves ending the turn to ``finish_answer``
            adapt_questions: Rephrase each question around the previous answer
            completion_message: Spoken once the interview is complete
        """
        self.flow = flow
        self.speech = speech
        self.channel = channel
        self.question_delay = question_delay
        self.settle_delay = settle_delay
        self.end_of_turn_silence = end_of_turn_silence
        self.adapt_questions = adapt_questions
        self.completion_message = completion_message

        self.emotion = "neutral"
        self.waiting_for_answer = False
        self.current_utterance: UtteranceHandle | None = None
        # Question index whose speech the next SPEAKING_ENDED belongs to
        self._spoken_index: int | None = None

        self._events: asyncio.Queue | None = None
        self._consumer: asyncio.Task | None = None
        self._silence_timer: asyncio.TimerHandle | None = None
        self._complete = asyncio.Event()

    async def start(self) -> None:
        """Begin consuming events, then resume or start the interview."""
        if self._consumer is not None:
            logger.warning("Orchestrator already started")
            return

        self._events = self.channel.stream()
        self._consumer = asyncio.get_running_loop().create_task(self._consume())
        await self.flow.load()

    async def wait_until_complete(self, timeout: float | None = None) -> None:
        """
        Wait for the interview to reach complete.

        Raises:
            asyncio.TimeoutError: Not complete within ``timeout`` seconds
        """
        await asyncio.wait_for(self._complete.wait(), timeout)

    async def stop(self) -> None:
        """Stop consuming events and silence speech."""
        self._cancel_silence_timer()
        self.speech.close()

        if self._events is not None:
            self.channel.close_stream(self._events)
            self._events = None

        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None

    async def finish_answer(self) -> None:
        """End the participant's turn now (e.g. a "done answering" button)."""
        transcript = self.speech.stop_listening()
        await self._submit(transcript)

    async def submit_answer(self, text: str) -> None:
        """Answer the current question with typed text instead of speech."""
        if self.flow.state != InterviewPhase.ACTIVE:
            logger.warning(f"Ignoring typed answer while {self.flow.state.value}")
            return

        self.waiting_for_answer = True
        if self.speech.is_listening:
            self.speech.stop_listening()
        await self._submit(text)

    async def _consume(self) -> None:
        while True:
            event = await self._events.get()
            try:
                await self._handle(event)
            except Exception as e:
                logger.error(f"Error handling {event.event_type.value}: {e}", exc_info=True)

    async def _handle(self, event: EngineEvent) -> None:
        event_type = event.event_type

        if event_type == EventType.NEW_QUESTION:
            await self._on_new_question(event.data["question"], event.data["index"])
        elif event_type == EventType.SPEAKING_ENDED:
            await self._on_speaking_ended()
        elif event_type == EventType.TRANSCRIPT:
            self._on_transcript(event.data.get("transcript", ""))
        elif event_type == EventType.SPEECH_END:
            await self._submit(event.data.get("transcript", ""))
        elif event_type == EventType.STATE_CHANGED:
            emotion = PHASE_EMOTIONS.get(event.data["current"])
            if emotion:
                self._set_emotion(emotion)
        elif event_type == EventType.INTERVIEW_COMPLETE:
            self._on_complete()

    async def _on_new_question(self, question: Question, index: int) -> None:
        self._set_emotion("interested")
        await asyncio.sleep(self.question_delay)

        # The flow may have moved on while we waited
        if self.flow.state != InterviewPhase.ACTIVE or self.flow.current_index != index:
            return

        text = question.text
        if self.adapt_questions:
            text = await self.flow.get_next_question() or text

        if self.speech.is_listening:
            self.speech.stop_listening()
        self._spoken_index = index
        self.current_utterance = self.speech.speak(text)

    def _ready_to_listen(self) -> bool:
        return (
            self.flow.state == InterviewPhase.ACTIVE
            and self._spoken_index == self.flow.current_index
            and not self.waiting_for_answer
            and not self.speech.is_speaking
            and not self.speech.is_listening
        )

    async def _on_speaking_ended(self) -> None:
        if not self._ready_to_listen():
            return

        await asyncio.sleep(self.settle_delay)
        if not self._ready_to_listen():
            return

        self.waiting_for_answer = True
        self._set_emotion("listening")
        if not self.speech.start_listening():
            logger.warning("Could not start listening; waiting for a typed answer")

    def _on_transcript(self, transcript: str) -> None:
        if not self.waiting_for_answer or not transcript or self.end_of_turn_silence is None:
            return

        self._cancel_silence_timer()
        self._silence_timer = asyncio.get_running_loop().call_later(
            self.end_of_turn_silence, self._on_silence
        )

    def _on_silence(self) -> None:
        self._silence_timer = None
        if self.waiting_for_answer and self.speech.is_listening:
            logger.debug("End of turn detected after silence")
            self.speech.stop_listening()

    async def _submit(self, transcript: str) -> None:
        if not self.waiting_for_answer:
            return

        self._cancel_silence_timer()

        if not transcript.strip():
            logger.info("Empty answer, listening again")
            if not self.speech.is_listening:
                self.speech.start_listening()
            return

        self.waiting_for_answer = False
        self._set_emotion("thinking")
        await self.flow.process_answer(transcript.strip())

    def _on_complete(self) -> None:
        self._cancel_silence_timer()
        self.waiting_for_answer = False
        self._spoken_index = None
        if self.speech.is_listening:
            self.speech.stop_listening()

        self._set_emotion("happy")
        self.current_utterance = self.speech.speak(self.completion_message)
        self._complete.set()

    def _set_emotion(self, emotion: str) -> None:
        if emotion == self.emotion:
            return
        self.emotion = emotion
        self.channel.publish(EventType.EMOTION_CHANGED, emotion=emotion)

    def _cancel_silence_timer(self) -> None:
        if self._silence_timer is not None:
            self._silence_timer.cancel()
            self._silence_timer = None
