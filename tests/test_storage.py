"""
Tests for session stores and store retries.
"""

import pytest

from interview_engine.core.models import Answer, InterviewPhase, InterviewSession, Question
from interview_engine.storage import (
    InMemorySessionStore,
    JsonFileSessionStore,
    PersistenceError,
    with_retry,
)


def make_session(session_id: str = "s-1") -> InterviewSession:
    return InterviewSession(
        session_id=session_id,
        questions=[Question(text="What problem does it solve?"), Question(text="Who uses it?")],
        answers=[Answer(question="What problem does it solve?", answer_text="Food waste.")],
        state=InterviewPhase.ACTIVE,
    )


class TestWithRetry:
    """Tests for bounded store retries."""

    @pytest.mark.asyncio
    async def test_linear_backoff_then_error(self):
        """Test three attempts with 2s then 4s waits, and no wait after the last."""
        delays = []
        attempts = 0

        async def record_sleep(seconds):
            delays.append(seconds)

        async def always_fails():
            nonlocal attempts
            attempts += 1
            raise OSError("disk unavailable")

        with pytest.raises(PersistenceError) as exc_info:
            await with_retry(always_fails, sleep=record_sleep, description="Save session s-1")

        assert attempts == 3
        assert delays == [2.0, 4.0]
        assert "Save session s-1" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_recovers_on_retry(self):
        delays = []
        results = iter([OSError("busy"), "ok"])

        async def record_sleep(seconds):
            delays.append(seconds)

        async def flaky():
            result = next(results)
            if isinstance(result, Exception):
                raise result
            return result

        assert await with_retry(flaky, delay_seconds=0.5, sleep=record_sleep) == "ok"
        assert delays == [0.5]


class TestSessionStores:
    """Tests for the in-memory and JSON file stores."""

    @pytest.mark.asyncio
    async def test_in_memory_store_snapshots(self):
        store = InMemorySessionStore()
        session = make_session()

        assert await store.load("s-1") is None
        await store.save(session)
        session.answers.append(Answer(question="Who uses it?", answer_text="Canteens."))

        loaded = await store.load("s-1")
        assert len(loaded.answers) == 1
        assert loaded.state == InterviewPhase.ACTIVE

    @pytest.mark.asyncio
    async def test_json_store_round_trip(self, tmp_path):
        store = JsonFileSessionStore(tmp_path / "sessions")
        session = make_session("workshop/42")

        await store.save(session)
        loaded = await store.load("workshop/42")

        assert (tmp_path / "sessions" / "session_workshop_42.json").exists()
        assert loaded.questions == session.questions
        assert loaded.answers == session.answers
        assert loaded.transcript == "Q: What problem does it solve?\nA: Food waste."
        assert not loaded.is_fully_answered

    @pytest.mark.asyncio
    async def test_json_store_missing_and_corrupt(self, tmp_path):
        store = JsonFileSessionStore(tmp_path)
        assert await store.load("nobody") is None

        (tmp_path / "session_broken.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            await store.load("broken")
