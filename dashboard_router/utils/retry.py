"""Retry coroutine functions with exponential backoff."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


async def retry_with_backoff(
    fn: Callable[[], Awaitable[Any]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 10.0,
    backoff_factor: float = 2.0,
    on_retry: Optional[Callable[[int, Exception], None]] = None
) -> Any:
    """
    Await fn(), retrying on failure with exponentially growing delays.

    The n-th retry (1-based) waits min(initial_delay * backoff_factor ** (n - 1), max_delay)
    seconds. With max_retries=2, fn runs at most three times.

    Args:
        fn: Zero-argument coroutine function to call
        max_retries: Retries after the first attempt
        initial_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any delay, in seconds
        backoff_factor: Multiplier applied to the delay after each retry
        on_retry: Called as on_retry(attempt, error) before each retry

    Returns:
        The first successful result of fn()

    Raises:
        The exception raised by the last attempt
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as e:
            if attempt >= max_retries:
                raise
            attempt += 1
            delay = min(initial_delay * (backoff_factor ** (attempt - 1)), max_delay)
            logger.debug("Attempt %d failed (%s); retrying in %.2fs", attempt, e, delay)
            if on_retry is not None:
                on_retry(attempt, e)
            await asyncio.sleep(delay)
