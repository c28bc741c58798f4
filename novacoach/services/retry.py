"""
Caller-side retry for generation calls.

The pipeline itself never retries. Callers that offer a "Retry" affordance
wrap the whole generation in with_retry instead of re-wiring it per call site.
"""
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from novacoach.core.errors import ClassifiedError


T = TypeVar("T")


def _should_retry(error: BaseException) -> bool:
    # Quota and billing failures will not clear within a backoff window.
    return (
        isinstance(error, ClassifiedError)
        and error.retryable
        and not error.discourage_immediate_retry
    )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 1,
    min_wait: float = 1.0,
    max_wait: float = 8.0,
) -> T:
    """
    Run a generation, re-running it on retryable classified errors.

    Args:
        operation: Zero-argument coroutine factory producing one attempt
        max_attempts: Total attempts, including the first
        min_wait: Lower bound of the exponential backoff, seconds
        max_wait: Upper bound of the exponential backoff, seconds

    Returns:
        The first successful result

    Raises:
        The last error once attempts are exhausted, or any non-retryable error
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception(_should_retry),
        before_sleep=before_sleep_log(logging.getLogger("novacoach"), logging.WARNING),
        reraise=True,
    ):
        with attempt:
            return await operation()
