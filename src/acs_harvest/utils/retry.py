# ABOUTME: Retry policy for transient page fetch failures using tenacity
# ABOUTME: Exponential backoff (2, 4, 8... seconds by default) bounded by a retry ceiling

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from acs_harvest.errors import TransientFetchError
from acs_harvest.utils.logging import get_logger

logger = get_logger(__name__)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    """Log each scheduled retry with the delay tenacity picked."""
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Transient fetch failure, retrying",
        attempt=retry_state.attempt_number,
        sleep_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(exception),
    )


def fetch_retrying(
    retries: int,
    backoff: float = 2.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> AsyncRetrying:
    """Build the retry loop for one harvest target.

    The initial attempt plus ``retries`` re-attempts are made. The n-th retry waits
    ``backoff * 2 ** (n - 1)`` seconds, i.e. ``2 ** n`` for the default. Only
    ``TransientFetchError`` is retried; the last one is re-raised once the ceiling is hit.

    Args:
        retries: Retry ceiling (R); total attempts are R + 1
        backoff: Multiplier for the exponential wait, 0 disables waiting
        sleep: Awaitable sleep function, injectable for tests

    Returns:
        Configured AsyncRetrying instance
    """
    return AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(multiplier=backoff, min=0, max=float("inf")),
        retry=retry_if_exception_type(TransientFetchError),
        before_sleep=_log_before_sleep,
        sleep=sleep,
        reraise=True,
    )
