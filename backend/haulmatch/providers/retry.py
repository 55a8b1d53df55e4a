"""Retry strategy for provider calls.

Exponential backoff with jitter, bounded by ProviderConfig.max_retries.
Only transient and rate-limit errors are retried; everything else propagates
on the first failure.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from haulmatch.providers.errors import RateLimitError, TransientError

__all__ = ["with_retries"]

if TYPE_CHECKING:
    from haulmatch.providers.config import ProviderConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retries(
    func: Callable[[], Awaitable[T]],
    config: "ProviderConfig",
    retryable_errors: tuple[type[Exception], ...] = (TransientError, RateLimitError),
) -> T:
    """Execute an async callable with exponential backoff retry.

    Args:
        func: Async function to execute (no arguments).
        config: Provider configuration with retry settings.
        retryable_errors: Tuple of error types that should trigger retry.

    Returns:
        Result from successful function execution.

    Raises:
        TransientError: If all retries exhausted due to transient failures.
        RateLimitError: If all retries exhausted due to rate limiting.

    Note:
        A RateLimitError carrying retry_after_seconds waits that long instead
        of the computed backoff, still capped at retry_max_delay_ms.
    """
    attempt = 0
    while True:
        try:
            return await func()
        except retryable_errors as e:
            if attempt >= config.max_retries:
                raise

            if isinstance(e, RateLimitError) and e.retry_after_seconds:
                delay_ms = e.retry_after_seconds * 1000
            else:
                base_delay = config.retry_base_delay_ms * (2**attempt)
                delay_ms = base_delay + random.uniform(0, base_delay * 0.1)
            delay = min(delay_ms, config.retry_max_delay_ms) / 1000

            logger.warning(
                "Provider error (attempt %d/%d): %s. Retrying in %.2fs",
                attempt + 1,
                config.max_retries + 1,
                e,
                delay,
            )
            attempt += 1
            await asyncio.sleep(delay)
