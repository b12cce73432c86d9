"""Web search strategies scraping DuckDuckGo result pages for PDF links."""

import logging
import re
from dataclasses import dataclass

from core.documents import Candidate

from ..dates import build_date_filter
from ..links import extract_pdf_urls, filename_title, stable_id
from .base import BaseSearchStrategy

logger = logging.getLogger(__name__)


def _with_date(query: str, date_filter: str) -> str:
    return f"{query} {date_filter}" if date_filter else query


class WebSearchStrategy(BaseSearchStrategy):
    """General web search with three phrasings of the query."""

    name = "web"

    async def _search(self, query, max_results, date_range):
        date_filter = build_date_filter(date_range)
        variants = [
            f'"{query}" filetype:pdf',
            f"{query} PDF download",
            f"{query} research paper PDF",
        ]

        results: list[Candidate] = []
        for variant in variants:
            try:
                page = await self._duckduckgo(_with_date(variant, date_filter))
            except Exception as e:
                logger.debug(f"Web query '{variant}' failed: {e}")
                continue
            for index, url in enumerate(extract_pdf_urls(page)):
                results.append(
                    Candidate(
                        id=stable_id("web", url),
                        title=filename_title(url) or query,
                        url=url,
                        source="Web Search",
                        relevance_score=0.8 - index * 0.1,
                        download_url=url,
                    )
                )
        return results


@dataclass(frozen=True)
class SiteProfile:
    """A site-scoped search: the query template and the links it trusts."""

    name: str
    source: str
    query_template: str
    url_pattern: str
    base_score: float


SITE_PROFILES = {
    "ieee": SiteProfile(
        name="ieee",
        source="IEEE Xplore",
        query_template='"{query}" site:ieeexplore.ieee.org filetype:pdf',
        url_pattern=r"https?://ieeexplore\.ieee\.org/[^\s\"'<>]+\.pdf",
        base_score=0.9,
    ),
    "scholar": SiteProfile(
        name="scholar",
        source="Google Scholar",
        query_template=(
            '"{query}" site:scholar.google.com OR site:arxiv.org OR site:researchgate.net '
            "filetype:pdf"
        ),
        url_pattern=(
            r"https?://[^\s\"'<>]*(?:arxiv\.org|researchgate\.net|scholar\.google\.com|"
            r"academia\.edu)[^\s\"'<>]*\.pdf"
        ),
        base_score=0.85,
    ),
    "researchgate": SiteProfile(
        name="researchgate",
        source="ResearchGate",
        query_template='"{query}" site:researchgate.net filetype:pdf',
        url_pattern=r"https?://[^\s\"'<>]*researchgate\.net[^\s\"'<>]*\.pdf",
        base_score=0.8,
    ),
    "ssrn": SiteProfile(
        name="ssrn",
        source="SSRN",
        query_template='"{query}" site:ssrn.com filetype:pdf',
        url_pattern=r"https?://[^\s\"'<>]*ssrn\.com[^\s\"'<>]*\.pdf",
        base_score=0.85,
    ),
    "government": SiteProfile(
        name="government",
        source="Government",
        query_template=(
            '"{query}" (site:gov OR site:nih.gov OR site:cdc.gov OR site:nasa.gov OR '
            "site:nist.gov OR site:energy.gov OR site:epa.gov OR site:fda.gov OR "
            "site:usda.gov OR site:treasury.gov OR site:whitehouse.gov OR "
            "site:congress.gov) filetype:pdf"
        ),
        url_pattern=r"https?://[^\s\"'<>]*\.gov[^\s\"'<>]*\.pdf",
        base_score=0.9,
    ),
    "technical": SiteProfile(
        name="technical",
        source="Technical Documentation",
        query_template=(
            '"{query}" (site:docs.microsoft.com OR site:developer.mozilla.org OR '
            "site:docs.aws.amazon.com OR site:cloud.google.com OR site:docs.docker.com OR "
            "site:kubernetes.io OR site:github.io OR site:readthedocs.io OR "
            '"technical manual" OR "API documentation" OR "user guide" OR '
            '"installation guide") filetype:pdf'
        ),
        url_pattern=(
            r"https?://[^\s\"'<>]*(?:docs\.|developer\.|github\.io|readthedocs\.io)"
            r"[^\s\"'<>]*\.pdf"
        ),
        base_score=0.75,
    ),
}


class SiteSearchStrategy(BaseSearchStrategy):
    """Single site-scoped query; only links matching the site pattern count."""

    def __init__(self, profile: SiteProfile, config=None, client=None):
        super().__init__(config, client)
        self.profile = profile
        self.name = profile.name
        self._pattern = re.compile(profile.url_pattern, re.IGNORECASE)

    async def _search(self, query, max_results, date_range):
        search_query = _with_date(
            self.profile.query_template.format(query=query), build_date_filter(date_range)
        )
        page = await self._duckduckgo(search_query)

        return [
            Candidate(
                id=stable_id(self.profile.name, url),
                title=filename_title(url) or query,
                url=url,
                source=self.profile.source,
                relevance_score=self.profile.base_score - index * 0.1,
                download_url=url,
            )
            for index, url in enumerate(extract_pdf_urls(page, self._pattern))
        ]
