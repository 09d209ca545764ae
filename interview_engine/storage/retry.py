"""
Bounded retry for session store calls.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from interview_engine.storage.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 2.0


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay_seconds: float = DEFAULT_RETRY_DELAY,
    description: str = "store operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run a store operation, retrying with linearly growing delays.

    Attempt ``n`` (0-based) that fails is followed by a wait of
    ``delay_seconds * (n + 1)`` before the next attempt.

    Args:
        operation: Zero-argument coroutine factory
        max_attempts: Total attempts including the first
        delay_seconds: Base delay
        description: Used in log messages
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        Result of the first successful attempt

    Raises:
        PersistenceError: Every attempt failed
    """
    last_error: Exception | None = None

    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            logger.warning(f"{description} failed (attempt {attempt + 1}/{max_attempts}): {e}")

            if attempt < max_attempts - 1:
                await sleep(delay_seconds * (attempt + 1))

    raise PersistenceError(
        f"{description} failed after {max_attempts} attempts: {last_error}"
    ) from last_error
