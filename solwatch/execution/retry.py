"""
Timeout race plus exponential backoff.

Each attempt races the coroutine against a timeout; failures sleep
min(base * 2**n, max) before the next attempt. After the last attempt the last
error is re-raised (timeouts as ExecutionTimeoutError).
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from solwatch.core.exceptions import ExecutionTimeoutError
from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_TIMEOUT_SEC = 10.0
DEFAULT_BASE_DELAY_SEC = 0.5
DEFAULT_MAX_DELAY_SEC = 8.0


def backoff_delay(attempt: int, base_delay_sec: float, max_delay_sec: float) -> float:
    """Delay after the given zero-based failed attempt."""
    return min(base_delay_sec * (2 ** attempt), max_delay_sec)


async def _attempt(fn: Callable[[], Awaitable[T]], timeout_sec: float, label: str) -> T:
    try:
        return await asyncio.wait_for(fn(), timeout=timeout_sec)
    except asyncio.TimeoutError:
        raise ExecutionTimeoutError(f"{label} timed out after {timeout_sec}s") from None


async def run_with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    base_delay_sec: float = DEFAULT_BASE_DELAY_SEC,
    max_delay_sec: float = DEFAULT_MAX_DELAY_SEC,
    label: str = "task",
) -> T:
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    for attempt in range(attempts - 1):
        try:
            return await _attempt(fn, timeout_sec, label)
        except Exception as e:
            logger.warning(
                "execution_retry",
                label=label,
                attempt=attempt + 1,
                max_attempts=attempts,
                error=str(e),
            )
        await asyncio.sleep(backoff_delay(attempt, base_delay_sec, max_delay_sec))
    try:
        return await _attempt(fn, timeout_sec, label)
    except Exception as e:
        logger.error("execution_give_up", label=label, max_attempts=attempts, error=str(e))
        raise
