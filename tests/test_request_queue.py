"""
Tests for RequestQueue.
"""

import asyncio

import pytest

from interview_engine.llm.request_queue import RequestQueue

from conftest import FAST_RATE_LIMIT


class TestRequestQueue:
    """Tests for FIFO, rate-limited dispatch."""

    def test_interval_from_rate_limit(self):
        """Test 10 calls/minute gives a 6 second spacing."""
        assert RequestQueue(rate_limit=10).interval == pytest.approx(6.0)

    def test_rejects_non_positive_rate_limit(self):
        with pytest.raises(ValueError):
            RequestQueue(rate_limit=0)

    @pytest.mark.asyncio
    async def test_single_in_flight_and_fifo_order(self):
        """Test items never overlap and finish in submission order."""
        queue = RequestQueue(rate_limit=FAST_RATE_LIMIT)
        running = 0
        max_running = 0
        finished = []

        def make_job(i):
            async def job():
                nonlocal running, max_running
                running += 1
                max_running = max(max_running, running)
                await asyncio.sleep(0.001 * (5 - i))
                running -= 1
                finished.append(i)
                return i

            return job

        results = await asyncio.gather(*(queue.enqueue(make_job(i)) for i in range(5)))

        assert results == [0, 1, 2, 3, 4]
        assert finished == [0, 1, 2, 3, 4]
        assert max_running == 1

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self):
        """Test a failing item rejects its caller and the queue keeps going."""
        queue = RequestQueue(rate_limit=FAST_RATE_LIMIT)

        async def boom():
            raise RuntimeError("provider down")

        async def ok():
            return "ok"

        first, second, third = await asyncio.gather(
            queue.enqueue(ok), queue.enqueue(boom), queue.enqueue(ok), return_exceptions=True
        )

        assert first == "ok"
        assert isinstance(second, RuntimeError)
        assert third == "ok"
        assert queue.completed == 3

    @pytest.mark.asyncio
    async def test_spacing_measured_from_completion(self):
        """Test the next dispatch waits the full interval after the previous item ends."""
        queue = RequestQueue(rate_limit=600)  # 0.1s interval
        loop = asyncio.get_running_loop()
        marks = []

        def make_job():
            async def job():
                marks.append(("start", loop.time()))
                await asyncio.sleep(0.05)
                marks.append(("end", loop.time()))

            return job

        await asyncio.gather(queue.enqueue(make_job()), queue.enqueue(make_job()))

        first_end = marks[1][1]
        second_start = marks[2][1]
        assert second_start - first_end >= 0.09

    @pytest.mark.asyncio
    async def test_enqueue_during_cooldown_waits(self):
        """Test a call arriving in the cooldown does not skip it."""
        queue = RequestQueue(rate_limit=600)  # 0.1s interval
        loop = asyncio.get_running_loop()

        async def job():
            return loop.time()

        first = await queue.enqueue(job)
        assert queue.is_busy

        second = await queue.enqueue(job)
        assert second - first >= 0.09

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending(self):
        queue = RequestQueue(rate_limit=1)  # 60s interval keeps the second item waiting

        async def job():
            return 1

        assert await queue.enqueue(job) == 1
        pending = asyncio.ensure_future(queue.enqueue(job))
        await asyncio.sleep(0)
        assert queue.pending == 1

        await queue.aclose()

        with pytest.raises(asyncio.CancelledError):
            await pending
        assert not queue.is_busy
