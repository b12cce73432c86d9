"""Local Tesseract OCR engine (free, no network)."""

import asyncio
import io
import logging
import time
from pathlib import Path

import pytesseract
from PIL import Image, ImageOps

from ..config import OCRConfig
from ..errors import EngineFailedError, EngineUnavailableError
from ..types import EngineCost, EngineInfo, OCROptions, OCROutcome
from .base import BaseOCREngine
from .rendering import render_pages

logger = logging.getLogger(__name__)


def tesseract_page(image: bytes, options: OCROptions) -> tuple[str, float]:
    """OCR one PNG page, returning text and mean word confidence in [0, 1].

    Blocking; call through ``asyncio.to_thread``. The tesseract subprocess is
    killed when ``options.timeout_seconds`` elapses.
    """
    picture = Image.open(io.BytesIO(image))
    if options.enhance_accuracy:
        picture = ImageOps.autocontrast(ImageOps.grayscale(picture))

    timeout = options.timeout_seconds or 0
    data = pytesseract.image_to_data(
        picture,
        lang=options.language,
        output_type=pytesseract.Output.DICT,
        timeout=timeout,
    )

    confidences: list[float] = []
    line_key = None
    lines: list[list[str]] = []
    for text, conf, block, par, line in zip(
        data["text"], data["conf"], data["block_num"], data["par_num"], data["line_num"]
    ):
        if not text or not text.strip():
            continue
        key = (block, par, line)
        if key != line_key:
            lines.append([])
            line_key = key
        lines[-1].append(text.strip())
        score = float(conf)
        if score >= 0:
            confidences.append(score / 100)

    page_text = "\n".join(" ".join(line) for line in lines)
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return page_text, confidence


class TesseractEngine(BaseOCREngine):
    """Tesseract via pytesseract over PyMuPDF-rendered pages.

    Pages are processed one at a time; tesseract already uses every core.
    """

    name = "tesseract"

    def __init__(self, config: OCRConfig | None = None):
        super().__init__(config)
        if self._config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._config.tesseract_cmd
        self._available: bool | None = None

    async def is_available(self) -> bool:
        if self._available is None:
            try:
                version = await asyncio.to_thread(pytesseract.get_tesseract_version)
                logger.debug(f"Tesseract {version} found")
                self._available = True
            except (pytesseract.TesseractNotFoundError, OSError) as e:
                logger.debug(f"Tesseract not available: {e}")
                self._available = False
        return self._available

    async def process(self, path: Path, options: OCROptions) -> OCROutcome:
        start = time.monotonic()
        if not await self.is_available():
            raise EngineUnavailableError("tesseract binary not found", provider=self.name)

        images = await asyncio.to_thread(
            render_pages, path, options.max_pages, self._config.render_dpi
        )

        texts: list[str] = []
        confidences: list[float] = []
        for page_number, image in enumerate(images, start=1):
            try:
                text, confidence = await asyncio.to_thread(tesseract_page, image, options)
            except (RuntimeError, pytesseract.TesseractError) as e:
                logger.warning(f"Tesseract failed on page {page_number}: {e}")
                continue
            if text.strip():
                texts.append(text.strip())
                confidences.append(confidence)

        if not texts:
            raise EngineFailedError(
                f"Tesseract produced no text for {path.name}", provider=self.name
            )

        success_fraction = len(texts) / len(images)
        mean_confidence = sum(confidences) / len(confidences)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        return OCROutcome(
            text="\n\n".join(texts),
            confidence=mean_confidence * success_fraction,
            processing_time_ms=elapsed_ms,
            engine=self.name,
            page_count=len(texts),
            language=options.language,
        )

    def describe(self) -> EngineInfo:
        return EngineInfo(
            name=self.name,
            display_name="Tesseract OCR",
            cost=EngineCost.FREE,
            capabilities=["offline", "multi-language", "word confidences"],
            configured=bool(self._available),
        )
