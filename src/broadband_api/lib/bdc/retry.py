"""Bounded retry with exponential backoff, and request pacing for rate-limited APIs."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

T = TypeVar("T")


def backoff_schedule(attempts: int, base_delay: float) -> list[float]:
    """Delays slept between consecutive attempts (``attempts - 1`` values, doubling).

    Examples:
        >>> backoff_schedule(4, 10.0)
        [10.0, 20.0, 40.0]
    """
    return [base_delay * (2**i) for i in range(max(attempts - 1, 0))]


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 10.0,
    timeout: float | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    description: str = "operation",
) -> T:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    Each attempt is bounded by ``timeout`` (a timed-out attempt counts as a
    failure). Between failed attempts the caller sleeps ``base_delay``,
    ``2 * base_delay``, ``4 * base_delay`` and so on.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt.
        attempts: Maximum number of attempts (at least 1).
        base_delay: Delay in seconds after the first failure.
        timeout: Per-attempt timeout in seconds, or None for no limit.
        retry_on: Exception types that trigger a retry; others propagate immediately.
        description: Label used in log messages.

    Returns:
        The result of the first successful attempt.

    Raises:
        The last exception raised once every attempt has failed.
    """
    if attempts < 1:
        msg = "attempts must be at least 1"
        raise ValueError(msg)

    delays = backoff_schedule(attempts, base_delay)
    for attempt in range(1, attempts + 1):
        try:
            if timeout is None:
                return await operation()
            return await asyncio.wait_for(operation(), timeout=timeout)
        except (*retry_on, TimeoutError) as e:
            if attempt == attempts:
                logger.error(f"{description} failed after {attempts} attempt(s): {e!r}")
                raise
            delay = delays[attempt - 1]
            logger.warning(f"{description} attempt {attempt}/{attempts} failed ({e!r}); retrying in {delay:.0f}s")
            await asyncio.sleep(delay)

    msg = "unreachable"
    raise AssertionError(msg)


class RequestPacer:
    """Enforces a minimum interval between consecutive request starts.

    Args:
        min_interval: Minimum seconds between two ``wait()`` returns.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._min_interval = min_interval
        self._clock = clock
        self._last_start: float | None = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Sleep until a new request may start, then record the start."""
        async with self._lock:
            if self._last_start is not None:
                remaining = self._last_start + self._min_interval - self._clock()
                if remaining > 0:
                    logger.debug(f"Rate limit: waiting {remaining:.1f}s before next request")
                    await asyncio.sleep(remaining)
            self._last_start = self._clock()
