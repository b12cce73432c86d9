"""Best-effort plain-text reconstruction from PDF text runs.

Runs on each page are ordered top to bottom by their baseline y coordinate;
a line break is inserted whenever consecutive runs differ vertically by more
than LINE_BREAK_DELTA. Extraction never raises: a malformed or unsupported
PDF yields an empty string, which the quality gate routes to OCR.
"""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple
from urllib.parse import unquote

from pypdf import PdfReader

from core.documents import DocumentMetadata

logger = logging.getLogger(__name__)

LINE_BREAK_DELTA = 0.5

_HORIZONTAL_WS = re.compile(r"[ \t]+")
_BLANK_LINES = re.compile(r"\n\s*\n")
_LEADING_SPACE = re.compile(r"\n ")


class TextRun(NamedTuple):
    text: str
    y: float


def assemble_page_text(runs: list[TextRun]) -> str:
    """Join a page's runs in reading order.

    Runs are stably sorted by descending y, so runs sharing a baseline keep
    their content-stream order. Each run is percent-decoded and followed by a
    single space.
    """
    parts: list[str] = []
    last_y: float | None = None

    for run in sorted(runs, key=lambda r: r.y, reverse=True):
        if last_y is not None and abs(run.y - last_y) > LINE_BREAK_DELTA:
            parts.append("\n")
        last_y = run.y
        parts.append(unquote(run.text) + " ")

    return "".join(parts)


def clean_extracted_text(text: str) -> str:
    """Collapse horizontal whitespace, drop blank lines, strip line indents."""
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _BLANK_LINES.sub("\n", text)
    text = _LEADING_SPACE.sub("\n", text)
    return text.strip()


def _baseline_y(cm: list[float], tm: list[float]) -> float:
    # y component of tm x cm, i.e. the run origin in user space
    return tm[4] * cm[1] + tm[5] * cm[3] + cm[5]


def _page_runs(page) -> list[TextRun]:
    runs: list[TextRun] = []

    def visitor(text, cm, tm, font_dict, font_size):
        if text and text.strip():
            runs.append(TextRun(text.replace("\n", " "), _baseline_y(cm, tm)))

    page.extract_text(visitor_text=visitor)
    return runs


def extract_text(path: str | Path) -> str:
    """Extract text from a PDF file, returning "" on any parse failure."""
    path = Path(path)
    try:
        reader = PdfReader(path)
        pages = [assemble_page_text(_page_runs(page)) for page in reader.pages]
    except Exception as e:
        logger.warning(f"Text extraction failed for {path.name}: {type(e).__name__}: {e}")
        return ""

    text = clean_extracted_text("\n\n".join(pages))
    logger.info(f"Extracted {len(text)} characters from {path.name} ({len(pages)} pages)")
    return text


def get_page_count(path: str | Path) -> int:
    """Number of pages, or 1 when the file cannot be parsed."""
    try:
        return len(PdfReader(path).pages)
    except Exception as e:
        logger.warning(f"Could not count pages in {Path(path).name}: {e}")
        return 1


def _iso(value) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return None


def extract_metadata(path: str | Path) -> DocumentMetadata:
    """Read the PDF info dictionary, falling back to filesystem timestamps."""
    path = Path(path)
    fields: dict = {}

    try:
        stat = path.stat()
        fields["file_size"] = stat.st_size
        fields["creation_date"] = datetime.fromtimestamp(stat.st_ctime, timezone.utc).isoformat()
        fields["modification_date"] = datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat()
        fields["title"] = path.stem
    except OSError as e:
        logger.warning(f"Could not stat {path}: {e}")
        return DocumentMetadata()

    try:
        info = PdfReader(path).metadata
    except Exception as e:
        logger.debug(f"No readable info dictionary in {path.name}: {e}")
        info = None

    if info is not None:
        for name in ("author", "title", "subject", "creator", "producer"):
            try:
                value = getattr(info, name)
            except Exception:
                value = None
            if value:
                fields[name] = str(value)
        for name, attr in (
            ("creation_date", "creation_date"),
            ("modification_date", "modification_date"),
        ):
            try:
                value = _iso(getattr(info, attr))
            except Exception:
                value = None
            if value:
                fields[name] = value

    return DocumentMetadata(**fields)
