"""Gemini vision OCR engine over the Generative Language REST API."""

import base64
import logging

import httpx

from ..config import OCRConfig
from ..errors import EngineFailedError
from ..types import EngineCost, EngineInfo, OCROptions
from .base import HttpPageEngine, page_prompt

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiEngine(HttpPageEngine):
    name = "gemini"
    page_confidence = 0.9

    def __init__(self, config: OCRConfig | None = None, client: httpx.AsyncClient | None = None):
        super().__init__(config, client)

    async def is_available(self) -> bool:
        return bool(self._config.google_api_key)

    async def _ocr_page(self, image: bytes, page_number: int, options: OCROptions) -> str:
        client = await self._get_client()
        payload = {
            "contents": [
                {
                    "parts": [
                        {"text": page_prompt(options)},
                        {
                            "inline_data": {
                                "mime_type": "image/png",
                                "data": base64.b64encode(image).decode("ascii"),
                            }
                        },
                    ]
                }
            ],
            "generationConfig": {"temperature": 0.1, "maxOutputTokens": 4096},
        }
        response = await client.post(
            f"{GEMINI_API_URL}/{self._config.gemini_model}:generateContent",
            json=payload,
            headers={"x-goog-api-key": self._config.google_api_key or ""},
        )
        response.raise_for_status()
        data = response.json()

        candidates = data.get("candidates") or []
        if not candidates:
            raise EngineFailedError(f"No candidates for page {page_number}", provider=self.name)
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts)

    def describe(self) -> EngineInfo:
        return EngineInfo(
            name=self.name,
            display_name="Gemini Vision OCR",
            cost=EngineCost.PAID_API,
            capabilities=["fast page OCR", "multi-language", "layout awareness"],
            configured=bool(self._config.google_api_key),
        )
