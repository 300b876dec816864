"""
Retry helper built on tenacity.

A RetryConfig with ``max_attempts=1`` runs the call exactly once. Only the
exception types it names are retried; anything else propagates at once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random_exponential,
)

from tedexplorer.core.logging import get_logger

logger = get_logger("retry")

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Attempt budget and backoff for one call.

    Attributes:
        max_attempts: Total attempts including the first (1 disables retry)
        min_wait: Lower bound on the backoff, in seconds
        max_wait: Upper bound on the backoff, in seconds
        multiplier: Exponential backoff multiplier
        jitter: Randomise the backoff
        retry_exceptions: Exception types that trigger another attempt
    """

    max_attempts: int = 1
    min_wait: float = 1.0
    max_wait: float = 30.0
    multiplier: float = 2.0
    jitter: bool = True
    retry_exceptions: tuple[type[BaseException], ...] = (Exception,)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def wait_strategy(self) -> Any:
        backoff = wait_random_exponential if self.jitter else wait_exponential
        return backoff(multiplier=self.multiplier, min=self.min_wait, max=self.max_wait)

    def retrying(self) -> AsyncRetrying:
        """A tenacity controller that re-raises the last failure."""
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait_strategy(),
            retry=retry_if_exception_type(self.retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )


async def retry_async(
    coro_func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig | None = None,
    **kwargs: Any,
) -> T:
    """Await ``coro_func(*args, **kwargs)`` under ``config``'s retry policy.

    Returns:
        The first successful result

    Raises:
        The last exception once attempts are exhausted, or any
        exception not listed in ``config.retry_exceptions``
    """
    config = config or RetryConfig()
    async for attempt in config.retrying():
        with attempt:
            return await coro_func(*args, **kwargs)

    raise AssertionError("unreachable")  # pragma: no cover
