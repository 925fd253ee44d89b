"""Exponential backoff for rate-limited provider calls.

This is the only place rate limits are absorbed. Every provider call made
by the agents goes through :func:`with_retry` (usually via a
:class:`RetryPolicy` built from settings). Errors that do not look like a
rate limit are re-raised at once, without any delay.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from config.exceptions import RateLimitedError
from config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Message markers providers use when rejecting a call for quota reasons
RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "rate_limit", "rate limit")

Sleep = Callable[[float], Awaitable[None]]


def is_rate_limit_error(error: BaseException) -> bool:
    """Return True when ``error`` signals a provider rate limit."""
    if isinstance(error, RateLimitedError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def backoff_delay(attempt: int, initial_delay: float, jitter: float, rng: Callable[[], float] = random.random) -> float:
    """Delay before retry number ``attempt`` (1-based)."""
    return initial_delay * (2 ** (attempt - 1)) + rng() * jitter


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 5,
    initial_delay: float = 61.0,
    jitter: float = 1.0,
    sleep: Sleep = asyncio.sleep,
    rng: Callable[[], float] = random.random,
) -> T:
    """Await ``fn()``, retrying on rate limits with exponential backoff.

    Args:
        fn: Zero-argument callable returning a fresh awaitable per attempt.
        max_retries: Retries allowed after the first attempt.
        initial_delay: Delay in seconds before the first retry.
        jitter: Upper bound of the random seconds added to each delay.
        sleep: Awaitable sleep, injectable for tests.
        rng: Source of uniform [0, 1) values for jitter.

    Returns:
        The first successful result.

    Raises:
        The last error once ``max_retries`` is exceeded, or any
        non-rate-limit error immediately.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as e:
            if not is_rate_limit_error(e):
                raise
            attempt += 1
            if attempt > max_retries:
                logger.error("Rate limit persisted after %d retries: %s", max_retries, e)
                raise
            delay = backoff_delay(attempt, initial_delay, jitter, rng)
            logger.warning(
                "Rate limited; retrying in %.1fs (attempt %d/%d)", delay, attempt, max_retries,
            )
            await sleep(delay)


@dataclass
class RetryPolicy:
    """Retry parameters bundled for reuse by every provider caller."""
    max_retries: int = 5
    initial_delay: float = 61.0
    jitter: float = 1.0
    sleep: Sleep = field(default=asyncio.sleep, repr=False)

    @classmethod
    def from_settings(cls, settings: Settings, sleep: Optional[Sleep] = None) -> "RetryPolicy":
        return cls(
            max_retries=settings.retry_max_retries,
            initial_delay=settings.retry_initial_delay,
            jitter=settings.retry_jitter,
            sleep=sleep or asyncio.sleep,
        )

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        return await with_retry(
            fn,
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            jitter=self.jitter,
            sleep=self.sleep,
        )
