"""Publication date hints and the strict client-side date filter.

Search hits carry no reliable dates, so a year is inferred from the arXiv id,
the URL, the title or a stored summary. When a date range is requested,
candidates without an inferable date are dropped.
"""

import logging
import re
from datetime import date

from core.documents import Candidate, DateRange

logger = logging.getLogger(__name__)

_ARXIV_ID = re.compile(
    r"/(\d{4})\.\d{4,5}"
    r"|arxiv\.org/(?:abs|pdf)/[a-z-]+(?:\.[A-Z]{2})?/(\d{4})\d{3}"
)
_URL_YEAR = re.compile(r"/(\d{4})/")
_TEXT_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")

# Open-ended ranges are rendered with these years
OPEN_START_YEAR = 2000


def build_date_filter(date_range: DateRange | None, today: date | None = None) -> str:
    """Year hint appended to search-engine queries, e.g. ``2019..2021``."""
    if date_range is None or date_range.is_empty:
        return ""

    start, end = date_range.start, date_range.end
    if start and end:
        if start.year == end.year:
            return f"{start.year}"
        return f"{start.year}..{end.year}"
    if start:
        current_year = (today or date.today()).year
        return f"{start.year}..{current_year}"
    return f"{OPEN_START_YEAR}..{end.year}"


def _year_date(value: str) -> date | None:
    match = _TEXT_YEAR.search(value)
    return date(int(match.group(0)), 1, 1) if match else None


def extract_document_date(candidate: Candidate) -> date | None:
    """Best-effort publication date for a search hit.

    Checked in order: arXiv ``YYMM.NNNNN`` or ``archive/YYMMNNN`` id in the
    URL, a ``/YYYY/`` URL segment, a 19xx/20xx year in the title, then in
    the stored summary or publication date.
    """
    arxiv = _ARXIV_ID.search(candidate.url)
    if arxiv:
        year_month = arxiv.group(1) or arxiv.group(2)
        year, month = int(year_month[:2]), int(year_month[2:])
        # arXiv started in 1991
        full_year = 1900 + year if year >= 91 else 2000 + year
        if 1 <= month <= 12:
            return date(full_year, month, 1)

    url_year = _URL_YEAR.search(candidate.url)
    if url_year:
        year = int(url_year.group(1))
        if year >= 1:
            return date(year, 1, 1)

    title_date = _year_date(candidate.title)
    if title_date:
        return title_date

    for key in ("summary", "published"):
        value = candidate.metadata.get(key)
        if isinstance(value, str):
            found = _year_date(value)
            if found:
                return found

    return None


def filter_by_date(candidates: list[Candidate], date_range: DateRange | None) -> list[Candidate]:
    """Keep candidates whose inferred date lies in the range (end inclusive)."""
    if date_range is None or date_range.is_empty:
        return candidates

    kept = []
    for candidate in candidates:
        found = extract_document_date(candidate)
        if found is None:
            logger.debug(f"No date found for '{candidate.title[:50]}', excluding")
            continue
        if date_range.start and found < date_range.start:
            continue
        if date_range.end and found > date_range.end:
            continue
        kept.append(candidate)

    logger.info(f"Date filter: {len(candidates)} -> {len(kept)} candidates")
    return kept
