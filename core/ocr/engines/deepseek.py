"""DeepSeek engine: local Tesseract OCR, then LLM cleanup of the raw text.

DeepSeek has no vision input, so it corrects recognition errors instead. If
the cleanup call fails the raw Tesseract text is returned.
"""

import asyncio
import logging
import time
from pathlib import Path

import httpx

from ..config import OCRConfig
from ..errors import EngineFailedError, EngineUnavailableError
from ..types import EngineCost, EngineInfo, OCROptions, OCROutcome
from .base import BaseOCREngine
from .rendering import render_pages
from .tesseract import tesseract_page

logger = logging.getLogger(__name__)

DEEPSEEK_API_URL = "https://api.deepseek.com/chat/completions"

CLEANUP_PROMPT = (
    "The following text was produced by OCR of a PDF document and may contain "
    "recognition errors. Correct obvious OCR mistakes, rejoin hyphenated words and "
    "keep the original structure and wording. Return only the corrected text.\n\n"
)


class DeepSeekEngine(BaseOCREngine):
    name = "deepseek"

    def __init__(self, config: OCRConfig | None = None, client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._config.request_timeout)
            self._owns_client = True
        return self._client

    async def is_available(self) -> bool:
        return bool(self._config.deepseek_api_key)

    async def process(self, path: Path, options: OCROptions) -> OCROutcome:
        start = time.monotonic()
        if not await self.is_available():
            raise EngineUnavailableError("DEEPSEEK_API_KEY is not set", provider=self.name)

        images = await asyncio.to_thread(
            render_pages, path, options.max_pages, self._config.render_dpi
        )
        results = await asyncio.gather(
            *(asyncio.to_thread(tesseract_page, image, options) for image in images),
            return_exceptions=True,
        )

        texts: list[str] = []
        confidences: list[float] = []
        for page_number, result in enumerate(results, start=1):
            if isinstance(result, BaseException):
                logger.warning(f"Local OCR failed on page {page_number}: {result}")
                continue
            text, confidence = result
            if text.strip():
                texts.append(text.strip())
                confidences.append(confidence)

        if not texts:
            raise EngineFailedError(
                f"Local OCR produced no text for {path.name}", provider=self.name
            )

        raw_text = "\n\n".join(texts)
        confidence = sum(confidences) / len(confidences)
        try:
            text = await self._cleanup(raw_text)
            confidence = min(1.0, confidence + 0.1)
        except (httpx.HTTPError, KeyError, IndexError) as e:
            logger.warning(f"DeepSeek cleanup failed, using raw OCR text: {e}")
            text = raw_text

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return OCROutcome(
            text=text,
            confidence=confidence * len(texts) / len(images),
            processing_time_ms=elapsed_ms,
            engine=self.name,
            page_count=len(texts),
            language=options.language,
        )

    async def _cleanup(self, raw_text: str) -> str:
        client = await self._get_client()
        response = await client.post(
            DEEPSEEK_API_URL,
            headers={"Authorization": f"Bearer {self._config.deepseek_api_key}"},
            json={
                "model": self._config.deepseek_model,
                "temperature": 0.1,
                "max_tokens": 4000,
                "messages": [{"role": "user", "content": CLEANUP_PROMPT + raw_text}],
            },
        )
        response.raise_for_status()
        cleaned = response.json()["choices"][0]["message"]["content"] or ""
        return cleaned.strip() or raw_text

    def describe(self) -> EngineInfo:
        return EngineInfo(
            name=self.name,
            display_name="DeepSeek OCR Cleanup",
            cost=EngineCost.PAID_API,
            capabilities=["local recognition", "LLM error correction", "low cost"],
            configured=bool(self._config.deepseek_api_key),
        )

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
