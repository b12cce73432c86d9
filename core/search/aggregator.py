"""Source aggregator: concurrent multi-strategy PDF search."""

import asyncio
import logging

import httpx
from cachetools import TTLCache

from core.documents import Candidate, DateRange

from .config import SearchConfig, get_search_config
from .dates import filter_by_date
from .ranking import dedupe_candidates, rank_candidates
from .strategies import BaseSearchStrategy, build_strategies

logger = logging.getLogger(__name__)

ALL_SOURCES = "all"


class SourceAggregator:
    """Runs the selected strategies concurrently and merges their results.

    Results are concatenated in strategy order, deduplicated on URL, ranked
    by relevance, date-filtered and truncated. Identical requests are served
    from a TTL cache.

    Usage:
        aggregator = SourceAggregator()
        candidates = await aggregator.search("graph neural networks", 10, ["arxiv", "web"])
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        strategies: dict[str, BaseSearchStrategy] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._config = config or get_search_config()
        self._strategies = (
            strategies if strategies is not None else build_strategies(self._config, client)
        )
        self._cache: TTLCache = TTLCache(
            maxsize=self._config.cache_size, ttl=self._config.cache_ttl_seconds
        )

    @property
    def strategy_names(self) -> list[str]:
        return list(self._strategies)

    def select_strategies(self, sources: list[str] | None) -> list[str]:
        """Strategy names for a source list, in registration order."""
        requested = {s.lower() for s in (sources or [ALL_SOURCES])}
        if ALL_SOURCES in requested:
            return self.strategy_names

        unknown = requested - set(self._strategies)
        if unknown:
            logger.warning(f"Ignoring unknown sources: {sorted(unknown)}")
        return [name for name in self._strategies if name in requested]

    def _cache_key(self, query, max_results, names, date_range) -> tuple:
        start = date_range.start if date_range else None
        end = date_range.end if date_range else None
        return (" ".join(query.lower().split()), max_results, tuple(names), start, end)

    async def search(
        self,
        query: str,
        max_results: int = 10,
        sources: list[str] | None = None,
        date_range: DateRange | None = None,
    ) -> list[Candidate]:
        """Search every selected source for PDFs.

        Args:
            query: Free-text query
            max_results: Cap on returned candidates (also passed to each strategy)
            sources: Strategy names, or ["all"] (default)
            date_range: Optional inclusive publication window

        Returns:
            Ranked, deduplicated candidates; [] when every source fails
        """
        names = self.select_strategies(sources)
        if not names or max_results <= 0:
            return []

        key = self._cache_key(query, max_results, names, date_range)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for search: {query}")
            return list(cached)

        logger.info(f"Searching {len(names)} sources for: {query}")
        batches = await asyncio.gather(
            *(self._strategies[name].search(query, max_results, date_range) for name in names)
        )
        for name, batch in zip(names, batches):
            logger.debug(f"{name} returned {len(batch)} candidates")

        combined = [candidate for batch in batches for candidate in batch]
        ranked = rank_candidates(dedupe_candidates(combined))
        results = filter_by_date(ranked, date_range)[:max_results]

        logger.info(f"Found {len(results)} PDF candidates for: {query}")
        # Empty results may be an outage; retry on the next call
        if results:
            self._cache[key] = tuple(results)
        return results

    def clear_cache(self) -> None:
        self._cache.clear()

    async def close(self) -> None:
        for strategy in self._strategies.values():
            await strategy.close()
