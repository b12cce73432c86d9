"""Text extraction, quality gating, merging and structure analysis."""

from .merge import OCR_SEPARATOR, MergedContent, merge_content
from .quality import QualityVerdict, decide_ocr, evaluate_text_quality
from .structure import analyze_structure, build_summary, summarize_sentences
from .text_extractor import (
    TextRun,
    assemble_page_text,
    clean_extracted_text,
    extract_metadata,
    extract_text,
    get_page_count,
)

__all__ = [
    "extract_text",
    "extract_metadata",
    "get_page_count",
    "assemble_page_text",
    "clean_extracted_text",
    "TextRun",
    "evaluate_text_quality",
    "decide_ocr",
    "QualityVerdict",
    "merge_content",
    "MergedContent",
    "OCR_SEPARATOR",
    "analyze_structure",
    "build_summary",
    "summarize_sentences",
]
