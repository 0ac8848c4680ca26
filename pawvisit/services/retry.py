"""Retry policy for read-only calls across the persistence boundary.

Only reads go through here. Writes are never retried so that a booking,
transition, or credit cannot be applied twice.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pawvisit.config import RetryConfig, settings
from pawvisit.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning("Read attempt %d failed (%s), retrying", state.attempt_number, exc)


async def retry_read(
    operation: Callable[[], Awaitable[T]],
    *,
    description: str,
    config: Optional[RetryConfig] = None,
) -> T:
    """Run a read, retrying UpstreamUnavailableError with exponential backoff."""
    config = config or settings.retry
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(UpstreamUnavailableError),
        wait=wait_exponential(multiplier=config.read_backoff_sec, max=5),
        stop=stop_after_attempt(config.read_attempts),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return await operation()
    raise UpstreamUnavailableError(f"{description} failed")
