"""Configuration for PDF acquisition."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass
class AcquisitionConfig:
    """Configuration for PDF downloads.

    Environment Variables:
        PDF_DOWNLOAD_DIR: Where downloaded PDFs are kept (default: data/pdfs)
        PDF_DOWNLOAD_TIMEOUT: Request timeout in seconds (default: 60)
        PDF_MIN_BYTES: Smaller payloads are rejected as error pages (default: 10000)
        PDF_BROWSER_FALLBACK: Retry blocked downloads in headless Chromium (default: false)
    """

    download_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("PDF_DOWNLOAD_DIR", "data/pdfs"))
    )
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("PDF_DOWNLOAD_TIMEOUT", "60"))
    )
    min_pdf_bytes: int = field(
        default_factory=lambda: int(os.environ.get("PDF_MIN_BYTES", "10000"))
    )
    browser_fallback: bool = field(
        default_factory=lambda: os.environ.get("PDF_BROWSER_FALLBACK", "false").lower()
        in ("1", "true", "yes")
    )
    max_attempts: int = 2


_config: AcquisitionConfig | None = None


def get_acquisition_config() -> AcquisitionConfig:
    """Get global AcquisitionConfig instance."""
    global _config
    if _config is None:
        _config = AcquisitionConfig()
    return _config
