"""Base class for PDF search strategies."""

import logging
from abc import ABC, abstractmethod

import httpx

from core.documents import Candidate, DateRange
from core.utils import BaseAsyncHttpClient, TRANSIENT_HTTP_ERRORS, is_transient_status, with_retry

from ..config import SEARCH_USER_AGENT, SearchConfig, get_search_config
from ..dates import filter_by_date
from ..errors import ProviderError

logger = logging.getLogger(__name__)

DUCKDUCKGO_HTML_URL = "https://duckduckgo.com/html/"


class BaseSearchStrategy(BaseAsyncHttpClient, ABC):
    """Abstract base for search strategies.

    Subclasses implement ``_search``. The public ``search`` never raises: a
    failing backend is logged and contributes no candidates.
    """

    name: str = ""

    def __init__(self, config: SearchConfig | None = None, client: httpx.AsyncClient | None = None):
        self._config = config or get_search_config()
        super().__init__(
            timeout=self._config.timeout,
            headers={"User-Agent": SEARCH_USER_AGENT},
            client=client,
        )

    async def search(
        self,
        query: str,
        max_results: int = 10,
        date_range: DateRange | None = None,
    ) -> list[Candidate]:
        """Search for PDF candidates.

        Returns:
            Up to ``max_results`` candidates inside ``date_range``; [] on failure
        """
        try:
            results = await self._search(query, max_results, date_range)
        except Exception as e:
            logger.warning(f"{self.name} search failed for '{query}': {e}")
            return []

        filtered = filter_by_date(results, date_range)
        logger.debug(f"{self.name}: {len(results)} raw -> {len(filtered)} after date filter")
        return filtered[:max_results]

    @abstractmethod
    async def _search(
        self,
        query: str,
        max_results: int,
        date_range: DateRange | None,
    ) -> list[Candidate]:
        pass

    async def _get(
        self,
        url: str,
        params: dict | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET with retry on transient failures.

        Raises:
            ProviderError: on a non-success status
        """
        client = await self._get_client()

        async def fetch() -> httpx.Response:
            response = await client.get(
                url,
                params=params,
                headers=self._request_headers(headers),
                follow_redirects=self.follow_redirects,
            )
            if is_transient_status(response.status_code):
                response.raise_for_status()
            return response

        response = await with_retry(
            fetch,
            max_attempts=self._config.max_attempts,
            retry_on=TRANSIENT_HTTP_ERRORS + (httpx.HTTPStatusError,),
            label=f"{self.name} request",
        )
        if not response.is_success:
            raise ProviderError(
                f"{self.name} returned HTTP {response.status_code}", provider=self.name
            )
        return response

    async def _duckduckgo(self, query: str) -> str:
        """HTML of a DuckDuckGo result page."""
        response = await self._get(DUCKDUCKGO_HTML_URL, params={"q": query})
        return response.text
