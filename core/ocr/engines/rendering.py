"""Rasterize PDF pages for image-based OCR engines."""

import logging
from pathlib import Path

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

PDF_POINTS_PER_INCH = 72


def render_pages(path: str | Path, max_pages: int, dpi: int = 150) -> list[bytes]:
    """Render up to ``max_pages`` leading pages as PNG bytes.

    Raises:
        RuntimeError/ValueError from PyMuPDF when the file cannot be opened.
    """
    zoom = dpi / PDF_POINTS_PER_INCH
    matrix = fitz.Matrix(zoom, zoom)
    images: list[bytes] = []

    with fitz.open(str(path)) as doc:
        count = min(max_pages, doc.page_count)
        for index in range(count):
            pixmap = doc.load_page(index).get_pixmap(matrix=matrix)
            images.append(pixmap.tobytes("png"))

    logger.debug(f"Rendered {len(images)} page(s) of {Path(path).name} at {dpi} dpi")
    return images
