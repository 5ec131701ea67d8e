"""Bounded retry with exponential backoff."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay_s: float = 2.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "operation",
) -> T:
    """
    Await ``operation`` until it succeeds or attempts run out.

    After failed attempt ``n`` (1-based, not the last) waits
    ``base_delay_s ** n`` seconds, i.e. 2s then 4s with the defaults.

    Args:
        operation: Zero-argument coroutine factory.
        max_attempts: Total attempts, at least 1.
        base_delay_s: Backoff base.
        retry_on: Exception types that trigger a retry; others propagate at once.
        sleep: Sleep function (injectable for tests).
        label: Name used in log lines.

    Returns:
        The operation's result.

    Raises:
        The last exception once all attempts have failed.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == attempts:
                logger.error("{} failed after {} attempts: {}", label, attempts, e)
                raise
            delay = base_delay_s ** attempt
            logger.warning(
                "{} failed (attempt {}/{}): {}. Retrying in {:.1f}s",
                label, attempt, attempts, e, delay,
            )
            await sleep(delay)
    raise RuntimeError("unreachable")
