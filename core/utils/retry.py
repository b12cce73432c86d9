"""Retry utilities for async operations."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Network errors worth a second attempt; 4xx responses are not
TRANSIENT_HTTP_ERRORS: tuple[type[Exception], ...] = (
    httpx.ConnectError,
    httpx.ReadTimeout,
    httpx.ConnectTimeout,
    httpx.RemoteProtocolError,
)


def is_transient_status(status_code: int) -> bool:
    """Server-side and rate-limit statuses that may succeed on retry."""
    return status_code == 429 or status_code >= 500


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    backoff_factor: float = 2.0,
    retry_on: tuple[type[Exception], ...] = TRANSIENT_HTTP_ERRORS,
    label: str = "operation",
) -> T:
    """Execute async function with exponential backoff retry.

    Waits ``backoff_factor ** attempt`` seconds between attempts and re-raises
    the last error once ``max_attempts`` is exhausted.
    """
    last_error: Exception | None = None
    for attempt in range(max_attempts):
        try:
            return await fn()
        except retry_on as e:
            last_error = e
            if attempt < max_attempts - 1:
                wait_time = backoff_factor**attempt
                logger.warning(
                    f"{label} failed (attempt {attempt + 1}/{max_attempts}): "
                    f"{type(e).__name__}, retrying in {wait_time}s"
                )
                await asyncio.sleep(wait_time)
    assert last_error is not None
    raise last_error
