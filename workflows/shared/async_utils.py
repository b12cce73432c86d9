"""Bounded-concurrency helpers for batch document work."""

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


async def map_with_concurrency(
    func: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    max_concurrent: int = 5,
    describe: Callable[[T], str] = repr,
) -> list[R | None]:
    """Await ``func(item)`` for every item, at most ``max_concurrent`` at once.

    Results keep the order of ``items``. An item whose call raises yields
    None and the error is logged using ``describe(item)``.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def run_one(item: T) -> R | None:
        async with semaphore:
            try:
                return await func(item)
            except Exception as e:
                logger.error(f"Batch task failed for {describe(item)}: {e}")
                return None

    return await asyncio.gather(*(run_one(item) for item in items))
