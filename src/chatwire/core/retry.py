"""core.retry

Caller-side retry utilities with exponential back-off + optional jitter.

The transport never retries on its own; a client opts in by passing a
`RetryStrategy`. Designed to run in the **core** layer and depends only on
Python stdlib + Pydantic.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import secrets
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from pydantic import BaseModel, Field

from chatwire.core.exceptions import NetworkError, RateLimitedError, RetryLimitExceededError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

P = ParamSpec('P')
T = TypeVar('T')

logger = logging.getLogger(__name__)


class RetryStrategy(BaseModel):
    """Configuration for exponential back-off retry with optional jitter."""

    max_attempts: int = Field(default=3, ge=1, description='Total attempts including the first call')
    base_backoff_sec: float = Field(default=1.0, ge=0.0, description='Initial delay before first retry (seconds)')
    max_backoff_sec: float = Field(default=30.0, ge=0.0, description='Upper bound for any sleep interval')
    jitter: bool = Field(default=True, description='Add random jitter (0-1s) to each interval')

    model_config = {
        'frozen': True,
    }

    def compute_delay(self, attempt_number: int) -> float:
        """Calculate sleep duration for the given attempt number (1-indexed)."""
        delay = min(self.base_backoff_sec * (2 ** (attempt_number - 1)), self.max_backoff_sec)

        if self.jitter:
            # Add random value between 0 and 1
            delay += secrets.randbelow(101) / 100

        return delay


def with_retry(
    strategy: RetryStrategy | None = None,
    retry_on: tuple[type[Exception], ...] | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Retry decorator for coroutine functions.

    Parameters
    ----------
    strategy
        Retry policy. Defaults to RetryStrategy() if None.
    retry_on
        Exception types that trigger a retry. Defaults to
        (RateLimitedError, NetworkError).

    Raises
    ------
    RetryLimitExceededError
        When the last allowed attempt still fails with a retryable error.
        The last error is chained as ``__cause__``.

    """
    retry_strategy = strategy or RetryStrategy()
    retry_exceptions = retry_on or (RateLimitedError, NetworkError)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt_number in range(1, retry_strategy.max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except retry_exceptions as exc:
                    if attempt_number == retry_strategy.max_attempts:
                        msg = f'Retry limit exceeded after {attempt_number} attempt(s)'
                        raise RetryLimitExceededError(msg) from exc
                    delay = retry_strategy.compute_delay(attempt_number)
                    logger.debug('attempt %d failed with %r, retrying in %.2fs', attempt_number, exc, delay)
                    await asyncio.sleep(delay)

            # max_attempts >= 1 makes this unreachable
            raise RetryLimitExceededError('Retry limit exceeded')

        return wrapper

    return decorator
