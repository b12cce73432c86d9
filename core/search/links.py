"""PDF link extraction from search-engine result pages."""

import hashlib
import html as html_lib
import re
from pathlib import PurePosixPath
from urllib.parse import parse_qs, unquote, urlparse

_PDF_URL = re.compile(r"https?://[^\s\"'<>]+\.pdf", re.IGNORECASE)

# Looser patterns for the universal strategy; may carry a query string
_UNIVERSAL_PATTERNS = [
    re.compile(r"https?://[^\s\"'<>]+\.pdf(?:\?[^\s\"'<>]*)?", re.IGNORECASE),
    re.compile(r"https?://[^\s\"'<>]*download[^\s\"'<>]*\.pdf", re.IGNORECASE),
    re.compile(r"https?://[^\s\"'<>]*file[^\s\"'<>]*\.pdf", re.IGNORECASE),
    re.compile(r"https?://[^\s\"'<>]*document[^\s\"'<>]*\.pdf", re.IGNORECASE),
]

_GENERIC_TITLE = re.compile(r"^(document|file|download|pdf)\d*$", re.IGNORECASE)


def _searchable_html(page: str) -> str:
    """Result pages often wrap targets in percent-encoded redirect links."""
    unescaped = html_lib.unescape(page)
    return unescaped + "\n" + unquote(unescaped)


def _unique(urls) -> list[str]:
    seen: set[str] = set()
    ordered = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            ordered.append(url)
    return ordered


def extract_pdf_urls(page: str, pattern: re.Pattern[str] | None = None) -> list[str]:
    """PDF URLs in page order, deduplicated.

    ``pattern`` narrows the match to a site (``ieeexplore.ieee.org``, ...).
    """
    regex = pattern or _PDF_URL
    return _unique(m.group(0) for m in regex.finditer(_searchable_html(page)))


def extract_universal_urls(page: str) -> list[str]:
    text = _searchable_html(page)
    found = (m.group(0).strip() for regex in _UNIVERSAL_PATTERNS for m in regex.finditer(text))
    return [url for url in _unique(found) if len(url) > 10 and is_probable_pdf_url(url)]


def is_probable_pdf_url(url: str) -> bool:
    """Whether a URL likely serves a PDF, judged from its path and query."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if not parsed.scheme or not parsed.netloc:
        return False

    path = parsed.path.lower()
    if path.endswith(".pdf"):
        return True

    params = parse_qs(parsed.query)
    if "pdf" in params or params.get("format") == ["pdf"] or params.get("type") == ["pdf"]:
        return True

    return any(
        "pdf" in segment or "download" in segment or "file" in segment
        for segment in path.split("/")
    )


def filename_title(url: str) -> str:
    """File stem with dashes and underscores turned into spaces."""
    stem = PurePosixPath(urlparse(url).path).name
    if stem.lower().endswith(".pdf"):
        stem = stem[:-4]
    return unquote(stem).replace("-", " ").replace("_", " ").strip()


def title_from_url(url: str, query: str) -> str:
    """Readable title for a bare PDF link.

    Falls back to a meaningful parent path segment for generic file names,
    then to the query.
    """
    title = re.sub(r"\s+", " ", filename_title(url))

    if len(title) < 3 or _GENERIC_TITLE.match(title):
        parts = [p for p in urlparse(url).path.split("/") if p]
        for part in reversed(parts[:-1]):
            candidate = unquote(part).replace("-", " ").replace("_", " ").strip()
            if len(candidate) > 3 and not candidate.isdigit():
                title = candidate
                break

    if len(title) < 3:
        title = f"{query} - Document"

    return " ".join(word[:1].upper() + word[1:].lower() for word in title.split(" "))


def stable_id(prefix: str, url: str) -> str:
    """Deterministic candidate id for hits that have no native identifier."""
    digest = hashlib.sha1(url.lower().encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"
