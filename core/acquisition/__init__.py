"""PDF acquisition: download, validation and mirror fallback."""

from .browser import BrowserFetcher
from .config import AcquisitionConfig, get_acquisition_config
from .detector import pmc_id_from_url, pmc_mirror_urls, validate_pdf_bytes
from .downloader import PdfDownloader, safe_filename
from .errors import AcquisitionError, DownloadHTTPError, NotAPdfError

__all__ = [
    "PdfDownloader",
    "BrowserFetcher",
    "AcquisitionConfig",
    "get_acquisition_config",
    "AcquisitionError",
    "NotAPdfError",
    "DownloadHTTPError",
    "validate_pdf_bytes",
    "pmc_id_from_url",
    "pmc_mirror_urls",
    "safe_filename",
]
