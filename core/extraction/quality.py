"""Quality gate deciding whether extracted text is good enough to skip OCR.

Checks run in a fixed order and the first failing one supplies the reason.
Everything here is a pure function over strings.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 500
MIN_LINES = 10
MIN_ALPHA_RATIO = 0.6
MAX_SUSPICIOUS_RATIO = 0.1
WORD_LENGTH_RANGE = (3.0, 15.0)
SHORT_LINE_CHARS = 20
MAX_SHORT_LINE_RATIO = 0.7

# A run of 10+ characters repeated at least three times back to back
_REPEATED_RUN = re.compile(r"(.{10,}?)\1{2,}")
# Anything outside ASCII word characters, whitespace and prose punctuation
_SUSPICIOUS_CHAR = re.compile(r"[^\w\s.,!?;:\-()\[\]{}\"']", re.ASCII)
_ALPHA_CHAR = re.compile(r"[a-zA-Z]")


@dataclass(frozen=True)
class QualityVerdict:
    """Outcome of the gate. ``reason`` is set whenever OCR is needed."""

    needs_ocr: bool
    reason: str | None = None


GOOD_QUALITY = QualityVerdict(needs_ocr=False)


def evaluate_text_quality(text: str) -> QualityVerdict:
    """Run the ordered quality checks over extracted text."""
    if not text or not text.strip():
        return QualityVerdict(True, "No text extracted from PDF")

    if len(text) < MIN_TEXT_LENGTH:
        return QualityVerdict(
            True, f"Minimal text extracted ({len(text)} < {MIN_TEXT_LENGTH} characters)"
        )

    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < MIN_LINES:
        return QualityVerdict(
            True, f"Very few text lines extracted ({len(lines)} < {MIN_LINES} lines)"
        )

    total_chars = len(re.sub(r"\s", "", text))
    alpha_chars = len(_ALPHA_CHAR.findall(text))
    alpha_ratio = alpha_chars / total_chars if total_chars else 0.0
    if alpha_ratio < MIN_ALPHA_RATIO:
        return QualityVerdict(
            True, f"Text appears garbled (alphabetic ratio: {alpha_ratio:.2f} < {MIN_ALPHA_RATIO})"
        )

    if _REPEATED_RUN.search(text):
        return QualityVerdict(True, "Detected repeated extraction artifacts")

    suspicious = len(_SUSPICIOUS_CHAR.findall(text))
    suspicious_ratio = suspicious / total_chars if total_chars else 0.0
    if suspicious_ratio > MAX_SUSPICIOUS_RATIO:
        return QualityVerdict(
            True,
            f"High suspicious character ratio: {suspicious_ratio:.2f} > {MAX_SUSPICIOUS_RATIO}",
        )

    words = text.split()
    avg_word_length = sum(len(w) for w in words) / len(words) if words else 0.0
    low, high = WORD_LENGTH_RANGE
    if avg_word_length < low or avg_word_length > high:
        return QualityVerdict(
            True, f"Unusual average word length: {avg_word_length:.1f} (expected {low:g}-{high:g})"
        )

    short_lines = sum(1 for line in lines if len(line.strip()) < SHORT_LINE_CHARS)
    short_ratio = short_lines / len(lines)
    if short_ratio > MAX_SHORT_LINE_RATIO:
        return QualityVerdict(
            True, f"Too many short lines: {short_ratio:.2f} > {MAX_SHORT_LINE_RATIO}"
        )

    logger.debug(
        f"Text quality acceptable (alpha ratio {alpha_ratio:.2f}, "
        f"avg word length {avg_word_length:.1f})"
    )
    return GOOD_QUALITY


def decide_ocr(
    text: str,
    include_ocr: bool = True,
    force_ocr: bool = False,
    bypass_text_check: bool = False,
) -> QualityVerdict:
    """Apply the caller's OCR flags, then the quality gate.

    Args:
        text: Extracted text
        include_ocr: When False OCR is never requested
        force_ocr: Request OCR regardless of text quality
        bypass_text_check: Debug override with the same effect as force_ocr

    Returns:
        QualityVerdict with the reason OCR is (or is not) needed
    """
    if not include_ocr:
        return GOOD_QUALITY
    if bypass_text_check:
        logger.info("Text check bypassed - requesting OCR")
        return QualityVerdict(True, "Bypass text check enabled for debugging")
    if force_ocr:
        logger.info("Force OCR enabled - skipping quality checks")
        return QualityVerdict(True, "Force OCR enabled")

    verdict = evaluate_text_quality(text)
    if verdict.needs_ocr:
        logger.info(f"OCR needed: {verdict.reason}")
    return verdict
