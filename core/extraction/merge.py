"""Combine directly extracted text with OCR output."""

import logging
from dataclasses import dataclass

from core.documents import ProcessingMethod
from core.ocr.types import OCROutcome

logger = logging.getLogger(__name__)

OCR_SEPARATOR = "\n\n--- OCR SUPPLEMENT ---\n\n"

# Extracted text at or below this length counts as absent
MIN_EXTRACTED_CHARS = 100
# OCR text must exceed this length to be used at all
MIN_OCR_CHARS = 50


@dataclass(frozen=True)
class MergedContent:
    text: str
    method: ProcessingMethod
    ocr_confidence: float | None = None
    ocr_engine: str | None = None


def merge_content(extracted: str, ocr: OCROutcome | None) -> MergedContent:
    """Pick the final text and processing method.

    - extracted absent, OCR usable: OCR text alone (``ocr``)
    - both usable: extracted + separator + OCR (``hybrid``)
    - otherwise: extracted text unchanged (``text-extraction``)

    Confidence and engine are only reported when OCR contributed.
    """
    extracted = extracted or ""
    ocr_text = ocr.text if ocr else ""

    if len(ocr_text) <= MIN_OCR_CHARS:
        if ocr is not None:
            logger.warning(f"OCR output too short to use ({len(ocr_text)} chars)")
        return MergedContent(text=extracted, method=ProcessingMethod.TEXT_EXTRACTION)

    if len(extracted) <= MIN_EXTRACTED_CHARS:
        method = ProcessingMethod.OCR
        text = ocr_text
    else:
        method = ProcessingMethod.HYBRID
        text = extracted + OCR_SEPARATOR + ocr_text

    logger.info(
        f"Merged content via {method.value} ({ocr.engine}, confidence {ocr.confidence:.2f})"
    )
    return MergedContent(
        text=text,
        method=method,
        ocr_confidence=ocr.confidence,
        ocr_engine=ocr.engine,
    )
