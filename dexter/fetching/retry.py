"""Bounded retry with exponential backoff for indexer calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import aiohttp

from dexter.errors import IndexerHTTPError, IndexerUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMITED = 429
TRANSIENT_EXCEPTIONS = (asyncio.TimeoutError, aiohttp.ClientConnectionError, ConnectionError)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 11
    base_delay: float = 1.0
    max_delay: float = 30.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay(self, retry: int) -> float:
        """Backoff before retry number `retry` (0 based)."""
        return min(self.base_delay * 2 ** retry, self.max_delay)


DEFAULT_RETRY_POLICY = RetryPolicy()


def is_transient(error: BaseException) -> bool:
    """Timeouts, dropped connections, 5xx and rate limiting are worth retrying."""
    if isinstance(error, IndexerHTTPError):
        return error.status >= 500 or error.status == RATE_LIMITED
    return isinstance(error, TRANSIENT_EXCEPTIONS)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    description: str = "indexer call",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run `operation`, retrying transient failures.

    Raises IndexerUnavailable carrying the last error once attempts run out,
    or straight away for a permanent error.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as e:
            if not is_transient(e):
                raise IndexerUnavailable(description, e, attempt) from e
            if attempt >= policy.max_attempts:
                logger.error(f"{description} failed after {attempt} attempts: {e!r}")
                raise IndexerUnavailable(description, e, attempt) from e
            delay = policy.delay(attempt - 1)
            logger.warning(f"{description} failed ({e!r}), retry {attempt}/{policy.max_attempts - 1} in {delay:.1f}s")
            await sleep(delay)
