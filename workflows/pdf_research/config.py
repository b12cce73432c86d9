"""Configuration for the PDF research pipeline."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass
class PipelineConfig:
    """Pipeline defaults.

    Environment Variables:
        PDF_STORE_DIR: Processed-document store (default: data/processed)
        PDF_INCLUDE_OCR: Allow OCR when extracted text is poor (default: false)
        OCR_MAX_PAGES: Leading pages sent to OCR engines (default: 5)
        PDF_BATCH_CONCURRENCY: Documents processed at once (default: 1, sequential)
        PDF_DETAILED_STRUCTURE: Keep up to 20 references instead of 5 (default: false)
    """

    store_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("PDF_STORE_DIR", "data/processed"))
    )
    include_ocr: bool = field(
        default_factory=lambda: os.environ.get("PDF_INCLUDE_OCR", "false").lower()
        in ("1", "true", "yes")
    )
    ocr_max_pages: int = field(
        default_factory=lambda: int(os.environ.get("OCR_MAX_PAGES", "5"))
    )
    batch_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("PDF_BATCH_CONCURRENCY", "1"))
    )
    detailed_structure: bool = field(
        default_factory=lambda: os.environ.get("PDF_DETAILED_STRUCTURE", "false").lower()
        in ("1", "true", "yes")
    )


_config: PipelineConfig | None = None


def get_pipeline_config() -> PipelineConfig:
    """Get global PipelineConfig instance."""
    global _config
    if _config is None:
        _config = PipelineConfig()
    return _config
