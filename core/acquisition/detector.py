"""PDF payload and URL checks."""

import re

from .errors import NotAPdfError

PDF_MAGIC = b"%PDF"

_PMC_PDF = re.compile(r"pmc/articles/PMC(\d+)", re.IGNORECASE)


def looks_like_html(content: bytes) -> bool:
    head = content[:1000].decode("utf-8", errors="ignore").lower()
    return "<html" in head or "<!doctype" in head


def validate_pdf_bytes(content: bytes, min_bytes: int = 0, content_type: str = "") -> None:
    """Reject payloads that are not a real PDF.

    Raises:
        NotAPdfError: HTML page, payload under ``min_bytes``, or missing header
    """
    if "text/html" in content_type.lower() or looks_like_html(content):
        raise NotAPdfError("Received HTML instead of PDF")
    if len(content) < min_bytes:
        raise NotAPdfError(f"Payload too small for a PDF ({len(content)} bytes)")
    if content[:4] != PDF_MAGIC:
        raise NotAPdfError("Missing %PDF header")


def pmc_id_from_url(url: str) -> str | None:
    """Numeric PubMed Central id for ``/pmc/articles/PMC<id>/pdf/`` links."""
    if "/pdf" not in url.lower():
        return None
    match = _PMC_PDF.search(url)
    return match.group(1) if match else None


def pmc_mirror_urls(pmc_id: str) -> list[str]:
    """Locations that may serve the PDF for a PMC article, in trial order."""
    return [
        f"https://www.ncbi.nlm.nih.gov/pmc/articles/PMC{pmc_id}/pdf/",
        f"https://europepmc.org/articles/PMC{pmc_id}?pdf=render",
        f"https://www.ncbi.nlm.nih.gov/pmc/articles/PMC{pmc_id}/pdf/main.pdf",
        f"https://www.ncbi.nlm.nih.gov/pmc/articles/PMC{pmc_id}/bin/",
    ]
