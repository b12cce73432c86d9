"""Marker engine: submits the PDF to a self-hosted Marker conversion service.

The service reads files from a shared input directory. A job is submitted
with ``POST /convert`` and polled at ``GET /jobs/{id}`` until it completes.
"""

import asyncio
import hashlib
import logging
import time
from pathlib import Path

import httpx

from ..config import OCRConfig
from ..errors import EngineFailedError, EngineUnavailableError
from ..types import EngineCost, EngineInfo, OCROptions, OCROutcome
from .base import BaseOCREngine

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 2.0

# Tesseract language codes to the names Marker expects
_MARKER_LANGS = {
    "eng": "English",
    "deu": "German",
    "fra": "French",
    "spa": "Spanish",
    "ita": "Italian",
    "por": "Portuguese",
}


class MarkerEngine(BaseOCREngine):
    name = "marker"

    def __init__(self, config: OCRConfig | None = None, client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.marker_base_url,
                timeout=self._config.request_timeout,
            )
            self._owns_client = True
        return self._client

    async def is_available(self) -> bool:
        try:
            client = await self._get_client()
            response = await client.get("/health", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"Marker service not reachable: {e}")
            return False

    def _save_input(self, path: Path) -> str:
        """Copy the PDF into the shared input directory; returns the relative name."""
        content = path.read_bytes()
        input_dir = Path(self._config.marker_input_dir)
        input_dir.mkdir(parents=True, exist_ok=True)
        filename = f"pdf_{hashlib.md5(content).hexdigest()[:12]}.pdf"
        (input_dir / filename).write_bytes(content)
        return filename

    async def process(self, path: Path, options: OCROptions) -> OCROutcome:
        start = time.monotonic()
        if not await self.is_available():
            raise EngineUnavailableError("Marker service is not reachable", provider=self.name)

        filename = await asyncio.to_thread(self._save_input, path)
        client = await self._get_client()

        response = await client.post(
            "/convert",
            json={
                "file_path": filename,
                "quality": "balanced" if options.enhance_accuracy else "fast",
                "markdown_only": not options.extract_structure,
                "langs": [_MARKER_LANGS.get(options.language, "English")],
            },
        )
        response.raise_for_status()
        job_id = response.json()["job_id"]
        logger.debug(f"Submitted Marker job {job_id} for {path.name}")

        markdown = await self._poll(client, job_id)
        if not markdown.strip():
            raise EngineFailedError(f"Marker job {job_id} returned no text", provider=self.name)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return OCROutcome(
            text=markdown,
            confidence=0.9,
            processing_time_ms=elapsed_ms,
            engine=self.name,
            language=options.language,
        )

    async def _poll(self, client: httpx.AsyncClient, job_id: str) -> str:
        """Poll until the job finishes. The manager's timeout bounds the wait."""
        while True:
            response = await client.get(f"/jobs/{job_id}")
            response.raise_for_status()
            data = response.json()
            status = data["status"]

            if status == "completed":
                return (data.get("result") or {}).get("markdown", "")
            elif status == "failed":
                error = data.get("error", "Unknown error")
                raise EngineFailedError(f"Marker job {job_id} failed: {error}", provider=self.name)
            elif status in ("pending", "processing"):
                await asyncio.sleep(POLL_INTERVAL_SECONDS)
            else:
                raise EngineFailedError(f"Unknown Marker job status: {status}", provider=self.name)

    def describe(self) -> EngineInfo:
        return EngineInfo(
            name=self.name,
            display_name="Marker PDF Conversion",
            cost=EngineCost.SELF_HOSTED,
            capabilities=["layout-aware markdown", "tables and equations", "GPU batch OCR"],
            configured=bool(self._config.marker_base_url),
        )

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
