"""Universal strategy: five query phrasings across three search engines."""

import asyncio
import logging
from urllib.parse import urlparse

from core.documents import Candidate

from ..dates import build_date_filter
from ..links import extract_universal_urls, stable_id, title_from_url
from ..ranking import dedupe_candidates, rank_candidates
from .base import DUCKDUCKGO_HTML_URL, BaseSearchStrategy

logger = logging.getLogger(__name__)

# (engine name, endpoint, query parameter)
SEARCH_ENGINES = [
    ("DuckDuckGo", DUCKDUCKGO_HTML_URL, "q"),
    ("Bing", "https://www.bing.com/search", "q"),
    ("Startpage", "https://www.startpage.com/sp/search", "query"),
]

QUERY_STRATEGIES = {
    "filetype": '"{query}" filetype:pdf',
    "keywords": '"{query}" ("download PDF" OR "view PDF" OR "PDF document" OR ".pdf")',
    "academic": (
        '"{query}" (site:edu OR site:ac.uk OR site:ac.jp OR site:uni- OR site:university '
        'OR "research paper" OR "academic paper") filetype:pdf'
    ),
    "corporate": (
        '"{query}" ("white paper" OR "technical report" OR "case study" OR '
        '"industry report" OR "company report") filetype:pdf'
    ),
    "educational": (
        '"{query}" ("course material" OR "lecture notes" OR "tutorial" OR "manual" OR '
        '"guide" OR "handbook") filetype:pdf'
    ),
}

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def score_universal_hit(url: str, index: int, strategy: str) -> float:
    """Position score plus a boost when the link fits the query phrasing."""
    score = 0.7 - index * 0.05
    domain = urlparse(url).hostname or ""
    lowered = url.lower()

    if strategy == "filetype" and ".pdf" in url:
        score += 0.2
    if strategy == "academic" and ("edu" in domain or "ac." in domain):
        score += 0.15
    if strategy == "corporate" and "whitepaper" in lowered:
        score += 0.1
    if strategy == "educational" and ("tutorial" in lowered or "guide" in lowered):
        score += 0.1
    return min(score, 1.0)


class UniversalSearchStrategy(BaseSearchStrategy):
    name = "universal"

    async def _search(self, query, max_results, date_range):
        date_filter = build_date_filter(date_range)
        jobs = []
        for strategy, template in QUERY_STRATEGIES.items():
            search_query = template.format(query=query)
            if date_filter:
                search_query = f"{search_query} {date_filter}"
            for engine in SEARCH_ENGINES:
                jobs.append(self._search_engine(engine, search_query, query, strategy))

        batches = await asyncio.gather(*jobs)
        results = [candidate for batch in batches for candidate in batch]
        logger.info(f"Universal search found {len(results)} links for '{query}'")

        return rank_candidates(dedupe_candidates(results))

    async def _search_engine(
        self,
        engine: tuple[str, str, str],
        search_query: str,
        query: str,
        strategy: str,
    ) -> list[Candidate]:
        engine_name, endpoint, param = engine
        try:
            response = await self._get(
                endpoint, params={param: search_query}, headers=BROWSER_HEADERS
            )
        except Exception as e:
            logger.debug(f"{engine_name} failed for strategy {strategy}: {e}")
            return []

        candidates = []
        for index, url in enumerate(extract_universal_urls(response.text)):
            candidates.append(
                Candidate(
                    id=stable_id(f"universal-{engine_name.lower()}", url),
                    title=title_from_url(url, query),
                    url=url,
                    source=f"Universal ({engine_name})",
                    relevance_score=score_universal_hit(url, index, strategy),
                    download_url=url,
                    metadata={
                        "search_engine": engine_name,
                        "strategy": strategy,
                        "domain": urlparse(url).hostname or "",
                    },
                )
            )
        return candidates
