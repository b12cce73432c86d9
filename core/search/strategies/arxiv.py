"""arXiv strategy over the Atom export API."""

import logging
import re
import xml.etree.ElementTree as ET

from core.documents import Candidate, DateRange

from .base import BaseSearchStrategy

logger = logging.getLogger(__name__)

ARXIV_API_URL = "https://export.arxiv.org/api/query"
ATOM_NS = {"atom": "http://www.w3.org/2005/Atom"}

# Bounds used when one side of the range is open
OPEN_START = "19910101"
OPEN_END = "99991231"


def build_arxiv_query(query: str, date_range: DateRange | None = None) -> str:
    """``all:`` query with an optional ``submittedDate`` clause."""
    search_query = f"all:{query}"
    if date_range is None or date_range.is_empty:
        return search_query

    if date_range.start:
        start = date_range.start.strftime("%Y%m%d") + "0000"
        end = date_range.end.strftime("%Y%m%d") + "2359" if date_range.end else OPEN_END
    else:
        start = OPEN_START
        end = date_range.end.strftime("%Y%m%d") + "2359"
    return f"{search_query} AND submittedDate:[{start} TO {end}]"


def arxiv_id_from_entry(entry_id: str) -> str:
    """Identifier after ``/abs/``, keeping the archive of old-style ids (``math/0601001v1``)."""
    entry_id = entry_id.strip().rstrip("/")
    if "/abs/" in entry_id:
        return entry_id.split("/abs/", 1)[1]
    return entry_id.rsplit("/", 1)[-1]


def parse_arxiv_feed(xml_text: str) -> list[Candidate]:
    """Candidates from an Atom feed, relevance decreasing by position."""
    root = ET.fromstring(xml_text)
    results = []

    for index, entry in enumerate(root.findall("atom:entry", ATOM_NS)):
        title = entry.findtext("atom:title", default="", namespaces=ATOM_NS)
        entry_id = entry.findtext("atom:id", default="", namespaces=ATOM_NS)
        arxiv_id = arxiv_id_from_entry(entry_id)
        if not title or not arxiv_id:
            continue

        summary = entry.findtext("atom:summary", default="", namespaces=ATOM_NS)
        published = entry.findtext("atom:published", default="", namespaces=ATOM_NS)
        results.append(
            Candidate(
                id=f"arxiv-{arxiv_id}",
                title=re.sub(r"\s+", " ", title).strip(),
                url=f"https://arxiv.org/abs/{arxiv_id}",
                source="arXiv",
                relevance_score=1.0 - index * 0.1,
                download_url=f"https://arxiv.org/pdf/{arxiv_id}.pdf",
                metadata={
                    "summary": re.sub(r"\s+", " ", summary).strip(),
                    "published": published,
                },
            )
        )

    return results


class ArxivStrategy(BaseSearchStrategy):
    name = "arxiv"

    async def _search(self, query, max_results, date_range):
        search_query = build_arxiv_query(query, date_range)
        logger.info(f"arXiv query: {search_query}")

        response = await self._get(
            ARXIV_API_URL,
            params={
                "search_query": search_query,
                "start": 0,
                "max_results": max_results,
                "sortBy": "submittedDate",
                "sortOrder": "descending",
            },
        )
        return parse_arxiv_feed(response.text)
