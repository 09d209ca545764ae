"""
FIFO, rate-limited, single-concurrency dispatcher for provider calls.

Every LLM call made by a session goes through one RequestQueue. Items run
strictly one at a time in submission order, and the worker waits
``60 / rate_limit`` seconds after each completion before dispatching the next
item, so throughput never exceeds ``rate_limit`` calls per minute.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class QueuedRequest:
    """A pending call and the future its caller is awaiting."""

    execute: Callable[[], Awaitable[Any]]
    future: asyncio.Future

    def resolve(self, result: Any) -> None:
        if not self.future.done():
            self.future.set_result(result)

    def reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)


class RequestQueue:
    """Serializes async work items under a calls-per-minute cap."""

    def __init__(self, rate_limit: float = 10):
        """
        Initialize the queue.

        Args:
            rate_limit: Maximum dispatches per minute
        """
        if rate_limit <= 0:
            raise ValueError("rate_limit must be positive")

        self.rate_limit = rate_limit
        self._pending: deque[QueuedRequest] = deque()
        self._worker: asyncio.Task | None = None
        self._in_flight = 0
        self.completed = 0

    @property
    def interval(self) -> float:
        """Seconds between one completion and the next dispatch."""
        return 60.0 / self.rate_limit

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def is_busy(self) -> bool:
        """True while an item runs or the post-completion cooldown is pending."""
        return self._worker is not None and not self._worker.done()

    async def enqueue(self, execute: Callable[[], Awaitable[Any]]) -> Any:
        """
        Queue a coroutine factory and wait for its result.

        Args:
            execute: Zero-argument callable returning an awaitable

        Returns:
            Whatever the awaitable returns

        Raises:
            Exception: Re-raises the exception raised by ``execute``
        """
        loop = asyncio.get_running_loop()
        request = QueuedRequest(execute=execute, future=loop.create_future())
        self._pending.append(request)

        if not self.is_busy:
            self._worker = loop.create_task(self._run())

        return await request.future

    async def _run(self) -> None:
        while self._pending:
            request = self._pending.popleft()

            if request.future.done():
                # Caller went away before dispatch
                continue

            self._in_flight += 1
            try:
                result = await request.execute()
            except asyncio.CancelledError as e:
                request.reject(e)
                raise
            except Exception as e:
                logger.warning(f"Queued request failed: {e}")
                request.reject(e)
            else:
                request.resolve(result)
            finally:
                self._in_flight -= 1
                self.completed += 1

            await asyncio.sleep(self.interval)

    async def aclose(self) -> None:
        """Stop the worker and cancel every queued item."""
        while self._pending:
            self._pending.popleft().reject(asyncio.CancelledError())

        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
