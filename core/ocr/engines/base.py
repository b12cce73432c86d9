"""Engine contract and the shared per-page fan-out for vision engines."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path

import httpx

from ..config import OCRConfig, get_ocr_config
from ..errors import EngineFailedError, EngineUnavailableError
from ..types import EngineInfo, OCROptions, OCROutcome
from .rendering import render_pages

logger = logging.getLogger(__name__)

STRUCTURED_PROMPT = (
    "Extract all text from this PDF page image with high accuracy. Preserve the "
    "original structure and reading order, including headings, paragraphs, "
    "captions, lists, table contents and equations. Return only the extracted text."
)
PLAIN_PROMPT = (
    "Extract all text from this PDF page image with high accuracy. Return only the "
    "text content without additional formatting or commentary."
)


def page_prompt(options: OCROptions) -> str:
    return STRUCTURED_PROMPT if options.extract_structure else PLAIN_PROMPT


class BaseOCREngine(ABC):
    """Abstract base for OCR engines.

    Engines hold configuration but no per-document state, so one instance
    serves every document.
    """

    name: str = ""

    def __init__(self, config: OCRConfig | None = None):
        self._config = config or get_ocr_config()

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the engine is configured and its backend reachable."""
        pass

    @abstractmethod
    async def process(self, path: Path, options: OCROptions) -> OCROutcome:
        """Run OCR over the leading pages of a PDF.

        Raises:
            OCRError subclasses on failure
        """
        pass

    @abstractmethod
    def describe(self) -> EngineInfo:
        """Static engine description for status reports."""
        pass

    async def close(self) -> None:
        """Release clients. Engines without connections need not override."""
        pass


class PageFanOutEngine(BaseOCREngine):
    """Engine that OCRs rendered pages concurrently and joins the results.

    A partial join is accepted: the confidence is scaled by the fraction of
    pages that produced text. Zero successful pages is a failure.
    """

    # Nominal confidence for a page this engine read successfully
    page_confidence: float = 0.9

    @abstractmethod
    async def _ocr_page(self, image: bytes, page_number: int, options: OCROptions) -> str:
        pass

    async def _ensure_available(self) -> None:
        if not await self.is_available():
            raise EngineUnavailableError(f"{self.name} engine is not configured", provider=self.name)

    async def process(self, path: Path, options: OCROptions) -> OCROutcome:
        start = time.monotonic()
        await self._ensure_available()

        images = await asyncio.to_thread(
            render_pages, path, options.max_pages, self._config.render_dpi
        )
        if not images:
            raise EngineFailedError(f"No pages rendered from {path.name}", provider=self.name)

        results = await asyncio.gather(
            *(self._ocr_page(image, i + 1, options) for i, image in enumerate(images)),
            return_exceptions=True,
        )

        texts: list[str] = []
        last_error: BaseException | None = None
        for page_number, result in enumerate(results, start=1):
            if isinstance(result, BaseException):
                last_error = result
                logger.warning(f"{self.name} failed on page {page_number}: {result}")
            elif result and result.strip():
                texts.append(result.strip())

        if not texts:
            detail = f": {last_error}" if last_error else ""
            raise EngineFailedError(
                f"{self.name} produced no text for {len(images)} page(s){detail}",
                provider=self.name,
            )

        success_fraction = len(texts) / len(images)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"{self.name} OCR read {len(texts)}/{len(images)} pages of {path.name} in {elapsed_ms}ms"
        )
        return OCROutcome(
            text="\n\n".join(texts),
            confidence=self.page_confidence * success_fraction,
            processing_time_ms=elapsed_ms,
            engine=self.name,
            page_count=len(texts),
            language=options.language,
        )


class HttpPageEngine(PageFanOutEngine):
    """Page engine backed by an HTTP API, with a lazily created client."""

    def __init__(self, config: OCRConfig | None = None, client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client (lazy initialization)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._config.request_timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
