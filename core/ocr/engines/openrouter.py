"""OpenRouter OCR engine: any vision model behind the OpenAI-style chat API."""

import base64
import logging

import httpx

from ..config import OCRConfig
from ..errors import EngineFailedError
from ..types import EngineCost, EngineInfo, OCROptions
from .base import HttpPageEngine, page_prompt

logger = logging.getLogger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1"


class OpenRouterEngine(HttpPageEngine):
    name = "openrouter"
    page_confidence = 0.85

    def __init__(self, config: OCRConfig | None = None, client: httpx.AsyncClient | None = None):
        super().__init__(config, client)

    async def is_available(self) -> bool:
        return bool(self._config.openrouter_api_key)

    async def _ocr_page(self, image: bytes, page_number: int, options: OCROptions) -> str:
        client = await self._get_client()
        data_url = "data:image/png;base64," + base64.b64encode(image).decode("ascii")
        response = await client.post(
            f"{OPENROUTER_API_URL}/chat/completions",
            headers={
                "Authorization": f"Bearer {self._config.openrouter_api_key}",
                "X-Title": "pdf-harvest",
            },
            json={
                "model": self._config.openrouter_model,
                "temperature": 0.1,
                "max_tokens": 4000,
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": page_prompt(options)},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
            },
        )
        response.raise_for_status()
        choices = response.json().get("choices") or []
        if not choices:
            raise EngineFailedError(f"No choices for page {page_number}", provider=self.name)
        return choices[0].get("message", {}).get("content") or ""

    def describe(self) -> EngineInfo:
        return EngineInfo(
            name=self.name,
            display_name="OpenRouter Vision OCR",
            cost=EngineCost.PAID_API,
            capabilities=["multi-model routing", "vision models", "cost-effective"],
            configured=bool(self._config.openrouter_api_key),
        )
