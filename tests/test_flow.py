"""
Tests for the InterviewFlow state machine.
"""

import pytest

from interview_engine.core.models import (
    Answer,
    InterviewPhase,
    InterviewSession,
    InterviewSummary,
    Question,
)
from interview_engine.events import EventType
from interview_engine.interview.flow import InterviewFlow
from interview_engine.llm.gateway import DEFAULT_QUESTIONS
from interview_engine.llm.prompts import (
    ADAPT_SYSTEM_PROMPT,
    QUESTION_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
)
from interview_engine.storage.session_store import InMemorySessionStore, SessionStore

CONTEXT = {"problem": "Food waste in school canteens"}

ANSWERS = [
    "We saw canteens throwing away a third of every meal.",
    "A forecasting model predicts attendance per day.",
    "Getting historical data from schools was hard.",
    "Teachers asked for a simpler dashboard, so we cut features.",
    "I would talk to kitchen staff much earlier.",
]


class BrokenStore(SessionStore):
    """Store whose every call fails."""

    def __init__(self):
        self.attempts = 0

    async def load(self, session_id):
        self.attempts += 1
        raise OSError("database offline")

    async def save(self, session):
        self.attempts += 1
        raise OSError("database offline")


@pytest.fixture
def store():
    return InMemorySessionStore()


def make_flow(gateway, store, channel, **kwargs):
    kwargs.setdefault("context", CONTEXT)
    return InterviewFlow("session-1", gateway, store, channel, retry_delay=0, **kwargs)


def stored_session(answered: int, with_summary: bool = False) -> InterviewSession:
    questions = [Question(text=f"Stored question {i}?") for i in range(5)]
    answers = [Answer(question=q.text, answer_text=ANSWERS[i]) for i, q in enumerate(questions[:answered])]
    return InterviewSession(
        session_id="session-1",
        questions=questions,
        answers=answers,
        summary=InterviewSummary(conclusion="Stored summary.") if with_summary else None,
    )


class TestInterviewFlow:
    """Tests for a fresh interview."""

    @pytest.mark.asyncio
    async def test_full_interview(self, gateway, scripted_client, store, channel):
        """Test five questions, five answers and exactly one summary."""
        flow = make_flow(gateway, store, channel)

        await flow.load()
        assert flow.state == InterviewPhase.ACTIVE
        assert flow.current_question.text == "Generated question 1?"
        assert flow.progress == {"current": 1, "total": 5}

        for answer in ANSWERS:
            await flow.process_answer(answer)

        assert flow.state == InterviewPhase.COMPLETE
        assert len(flow.answers) == 5
        assert flow.summary.conclusion == "Great interview."

        questions = channel.of_type(EventType.NEW_QUESTION)
        assert [e.data["index"] for e in questions] == [0, 1, 2, 3, 4]
        assert questions[-1].data["progress"] == {"current": 5, "total": 5}

        completes = channel.of_type(EventType.INTERVIEW_COMPLETE)
        assert len(completes) == 1
        assert completes[0].data["summary"] is flow.summary

        # Late answers are ignored and never trigger a second summary
        await flow.process_answer("One more thing")
        assert len(flow.answers) == 5
        assert len(scripted_client.calls_for(SUMMARY_SYSTEM_PROMPT)) == 1

        await flow.drain_persistence()
        saved = await store.load("session-1")
        assert saved.state == InterviewPhase.COMPLETE
        assert saved.summary.conclusion == "Great interview."
        assert saved.transcript.startswith("Q: Generated question 1?\nA: We saw canteens")

    @pytest.mark.asyncio
    async def test_state_sequence(self, gateway, store, channel):
        flow = make_flow(gateway, store, channel)

        await flow.load()
        for answer in ANSWERS:
            await flow.process_answer(answer)

        states = [e.data["current"] for e in channel.of_type(EventType.STATE_CHANGED)]
        assert states[0] == InterviewPhase.PREPARING
        assert states[1:6] == [InterviewPhase.ACTIVE] * 5
        assert states[-2:] == [InterviewPhase.PROCESSING, InterviewPhase.COMPLETE]

    @pytest.mark.asyncio
    async def test_failing_provider_still_completes(self, failing_gateway, store, channel):
        flow = make_flow(failing_gateway, store, channel)

        await flow.load()
        assert flow.questions == DEFAULT_QUESTIONS

        for answer in ANSWERS:
            await flow.process_answer(answer)

        assert flow.state == InterviewPhase.COMPLETE
        assert flow.summary.is_fallback
        assert len(flow.summary.key_points) == 5

    @pytest.mark.asyncio
    async def test_adapted_next_question(self, gateway, scripted_client, store, channel):
        flow = make_flow(gateway, store, channel)

        await flow.load()
        assert await flow.get_next_question() == "Generated question 1?"

        await flow.process_answer(ANSWERS[0])
        assert await flow.get_next_question() == "So, building on that, what came next?"
        assert len(scripted_client.calls_for(ADAPT_SYSTEM_PROMPT)) == 1

    @pytest.mark.asyncio
    async def test_restart_after_complete(self, gateway, store, channel):
        flow = make_flow(gateway, store, channel)

        await flow.load()
        for answer in ANSWERS:
            await flow.process_answer(answer)
        await flow.start()

        assert flow.state == InterviewPhase.ACTIVE
        assert flow.answers == []
        assert flow.summary is None


class TestResume:
    """Tests for resuming a stored session."""

    @pytest.mark.asyncio
    async def test_resume_mid_interview(self, gateway, scripted_client, store, channel):
        """Test a session with 3 of 5 answers resumes at the fourth question."""
        await store.save(stored_session(answered=3))
        flow = make_flow(gateway, store, channel)

        state = await flow.load()

        assert state == InterviewPhase.ACTIVE
        assert flow.current_index == 3
        assert flow.current_question.text == "Stored question 3?"
        assert channel.of_type(EventType.NEW_QUESTION)[0].data["index"] == 3
        assert scripted_client.calls_for(QUESTION_SYSTEM_PROMPT) == []

        await flow.process_answer(ANSWERS[3])
        await flow.process_answer(ANSWERS[4])
        assert flow.state == InterviewPhase.COMPLETE
        assert len(flow.answers) == 5

    @pytest.mark.asyncio
    async def test_resume_completed_session(self, gateway, scripted_client, store, channel):
        await store.save(stored_session(answered=5, with_summary=True))
        flow = make_flow(gateway, store, channel)

        assert await flow.load() == InterviewPhase.COMPLETE
        assert flow.summary.conclusion == "Stored summary."
        assert channel.of_type(EventType.INTERVIEW_COMPLETE)[0].data["summary"] == flow.summary
        assert channel.of_type(EventType.NEW_QUESTION) == []
        assert scripted_client.calls == []

    @pytest.mark.asyncio
    async def test_resume_answered_without_summary(self, gateway, scripted_client, store, channel):
        await store.save(stored_session(answered=5))
        flow = make_flow(gateway, store, channel)

        assert await flow.load() == InterviewPhase.COMPLETE
        assert flow.summary.conclusion == "Great interview."
        assert len(scripted_client.calls_for(SUMMARY_SYSTEM_PROMPT)) == 1

    @pytest.mark.asyncio
    async def test_unanswered_session_starts_fresh(self, gateway, scripted_client, store, channel):
        await store.save(stored_session(answered=0))
        flow = make_flow(gateway, store, channel)

        await flow.load()

        assert flow.current_question.text == "Generated question 1?"
        assert len(scripted_client.calls_for(QUESTION_SYSTEM_PROMPT)) == 1


class TestPersistenceFailures:
    """Tests for interviews that outlive their store."""

    @pytest.mark.asyncio
    async def test_interview_continues_in_memory(self, gateway, channel):
        store = BrokenStore()
        flow = make_flow(gateway, store, channel, max_attempts=2)

        await flow.load()
        for answer in ANSWERS:
            await flow.process_answer(answer)
        await flow.drain_persistence()

        assert flow.state == InterviewPhase.COMPLETE
        assert flow.summary is not None
        assert "database offline" in flow.last_persistence_error
        # One load plus seven saves, two attempts each
        assert store.attempts == 16
