"""
Interview flow - session state machine over questions and answers.

idle -> preparing -> active (once per question) -> processing -> complete

The gateway never raises, so every path from idle ends in complete. Saving
the session is best effort: saves run in the background, and a save that
still fails after retries is logged while the interview carries on in memory.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from interview_engine.core.models import (
    Answer,
    InterviewPhase,
    InterviewSession,
    InterviewSummary,
    Question,
)
from interview_engine.events import EventChannel, EventType
from interview_engine.llm.gateway import LLMGateway
from interview_engine.storage.exceptions import PersistenceError
from interview_engine.storage.retry import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY, with_retry
from interview_engine.storage.session_store import SessionStore
from interview_engine.utils.logger import InterviewLogger

logger = logging.getLogger(__name__)


class InterviewFlow:
    """Drives one interview session from question generation to summary."""

    def __init__(
        self,
        session_id: str,
        gateway: LLMGateway,
        store: SessionStore,
        channel: EventChannel,
        context: dict[str, Any] | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        interview_logger: InterviewLogger | None = None,
    ):
        """
        Initialize interview flow.

        Args:
            session_id: Session identifier used for persistence
            gateway: LLM gateway for questions and summaries
            store: Session store
            channel: Session event channel
            context: Participant input from earlier workshop sections
            max_attempts: Store attempts per save or load
            retry_delay: Base delay between store attempts, in seconds
            interview_logger: Structured session logger
        """
        self.session_id = session_id
        self.gateway = gateway
        self.store = store
        self.channel = channel
        self.context = context or {}
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.log = interview_logger or InterviewLogger(session_id, log_to_file=False)

        self.state = InterviewPhase.IDLE
        self.questions: list[Question] = []
        self.answers: list[Answer] = []
        self.summary: InterviewSummary | None = None
        self.current_index = 0
        self.last_persistence_error: str | None = None

        self._summary_requested = False
        self._save_lock = asyncio.Lock()
        self._save_tasks: set[asyncio.Task] = set()

    @property
    def current_question(self) -> Question | None:
        if self.state != InterviewPhase.ACTIVE or self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def progress(self) -> dict[str, int]:
        """1-based position of the current question and the total."""
        total = len(self.questions)
        return {"current": min(self.current_index + 1, total), "total": total}

    def snapshot(self) -> InterviewSession:
        return InterviewSession(
            session_id=self.session_id,
            questions=list(self.questions),
            answers=list(self.answers),
            summary=self.summary,
            state=self.state,
            updated_at=datetime.now(),
        )

    async def load(self) -> InterviewPhase:
        """
        Resume a stored session, or start a new one.

        Returns:
            State after resuming
        """
        try:
            session = await with_retry(
                lambda: self.store.load(self.session_id),
                max_attempts=self.max_attempts,
                delay_seconds=self.retry_delay,
                description=f"Load session {self.session_id}",
            )
        except PersistenceError as e:
            self.last_persistence_error = str(e)
            self.log.persistence_failed(str(e))
            session = None

        if session is None:
            await self.start()
            return self.state

        answered = len(session.answers)
        total = len(session.questions)

        if session.summary is not None:
            self._restore(session)
            self._summary_requested = True
            self.current_index = max(total - 1, 0)
            self.log.session_start(total, resumed=True)
            self._transition(InterviewPhase.COMPLETE)
            self.channel.publish(EventType.INTERVIEW_COMPLETE, summary=self.summary)
        elif 0 < answered < total:
            self._restore(session)
            self.current_index = answered
            self.log.session_start(total, resumed=True)
            self._transition(InterviewPhase.ACTIVE)
            self._announce_question()
        elif total > 0 and answered >= total:
            self._restore(session)
            self.current_index = total - 1
            self.log.session_start(total, resumed=True)
            self._transition(InterviewPhase.PROCESSING)
            await self._generate_summary()
        else:
            await self.start()

        return self.state

    def _restore(self, session: InterviewSession) -> None:
        self.questions = list(session.questions)
        self.answers = list(session.answers[: len(session.questions)])
        self.summary = session.summary
        logger.info(
            f"Resuming session {self.session_id}: "
            f"{len(self.answers)}/{len(self.questions)} answered"
        )

    async def start(self) -> None:
        """Start a fresh interview: reset answers and request new questions."""
        if self.state not in (InterviewPhase.IDLE, InterviewPhase.COMPLETE):
            logger.warning(f"Cannot start interview while {self.state.value}")
            return

        self.answers = []
        self.summary = None
        self.current_index = 0
        self._summary_requested = False
        self._transition(InterviewPhase.PREPARING)

        self.questions = await self.gateway.generate_interview_questions(self.context)
        if not self.questions:
            self.questions = self.gateway.default_questions()

        self.log.session_start(len(self.questions))
        self._transition(InterviewPhase.ACTIVE)
        self._schedule_save()
        self._announce_question()

    async def process_answer(self, text: str) -> None:
        """
        Record the answer to the current question and move on.

        Args:
            text: Participant's answer
        """
        question = self.current_question
        if question is None:
            logger.warning(f"Ignoring answer while {self.state.value}")
            return

        self.answers.append(Answer(question=question.text, answer_text=text))
        self.log.answer_received(text)
        self._schedule_save()

        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
            self._transition(InterviewPhase.ACTIVE)
            self._announce_question()
        else:
            self._transition(InterviewPhase.PROCESSING)
            await self._generate_summary()

    async def get_next_question(self) -> str | None:
        """
        Current question rephrased around the previous answer.

        Returns:
            Question text, or None when no question is active
        """
        question = self.current_question
        if question is None:
            return None
        previous = self.answers[-1].answer_text if self.answers else None
        return await self.gateway.adapt_question(question.text, previous)

    async def _generate_summary(self) -> None:
        if self._summary_requested:
            return
        self._summary_requested = True

        self.summary = await self.gateway.generate_interview_summary(self.answers)
        self.log.summary_generated(self.summary.is_fallback)

        self._transition(InterviewPhase.COMPLETE)
        self._schedule_save()

        analytics = self.summary.engagement_analytics
        self.log.session_end(
            len(self.answers), analytics.dominant_sentiment, analytics.average_engagement_score
        )
        self.channel.publish(EventType.INTERVIEW_COMPLETE, summary=self.summary)

    def _announce_question(self) -> None:
        question = self.questions[self.current_index]
        self.log.question_asked(self.current_index + 1, question.text)
        self.channel.publish(
            EventType.NEW_QUESTION,
            question=question,
            index=self.current_index,
            progress=self.progress,
        )

    def _transition(self, new_state: InterviewPhase) -> None:
        previous = self.state
        self.state = new_state
        self.log.state_changed(previous.value, new_state.value)
        self.channel.publish(EventType.STATE_CHANGED, previous=previous, current=new_state)

    # Persistence

    def _schedule_save(self) -> None:
        session = self.snapshot()
        task = asyncio.get_running_loop().create_task(self._save(session))
        self._save_tasks.add(task)
        task.add_done_callback(self._save_tasks.discard)

    async def _save(self, session: InterviewSession) -> None:
        # asyncio.Lock wakes waiters in FIFO order, so saves land in mutation order
        async with self._save_lock:
            try:
                await with_retry(
                    lambda: self.store.save(session),
                    max_attempts=self.max_attempts,
                    delay_seconds=self.retry_delay,
                    description=f"Save session {self.session_id}",
                )
            except PersistenceError as e:
                self.last_persistence_error = str(e)
                self.log.persistence_failed(str(e))

    async def drain_persistence(self) -> None:
        """Wait for every scheduled save to finish."""
        while self._save_tasks:
            await asyncio.gather(*list(self._save_tasks))
