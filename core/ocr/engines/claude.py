"""Claude vision OCR engine using the Anthropic SDK."""

import base64
import logging

import anthropic

from ..config import OCRConfig
from ..errors import EngineFailedError
from ..types import EngineCost, EngineInfo, OCROptions
from .base import PageFanOutEngine, page_prompt

logger = logging.getLogger(__name__)


class ClaudeEngine(PageFanOutEngine):
    """Sends each rendered page to Claude as a base64 PNG image block."""

    name = "claude"
    page_confidence = 0.95

    def __init__(self, config: OCRConfig | None = None, client: anthropic.AsyncAnthropic | None = None):
        super().__init__(config)
        self._client = client

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._config.anthropic_api_key,
                timeout=self._config.request_timeout,
            )
        return self._client

    async def is_available(self) -> bool:
        return bool(self._config.anthropic_api_key)

    async def _ocr_page(self, image: bytes, page_number: int, options: OCROptions) -> str:
        response = await self._get_client().messages.create(
            model=self._config.claude_model,
            max_tokens=4000,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": page_prompt(options)},
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": "image/png",
                                "data": base64.b64encode(image).decode("ascii"),
                            },
                        },
                    ],
                }
            ],
        )

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text.strip():
            raise EngineFailedError(f"Empty response for page {page_number}", provider=self.name)
        logger.debug(f"Claude extracted {len(text)} characters from page {page_number}")
        return text

    def describe(self) -> EngineInfo:
        return EngineInfo(
            name=self.name,
            display_name="Claude Vision OCR",
            cost=EngineCost.PAID_API,
            capabilities=[
                "high-accuracy text extraction",
                "multi-language",
                "structure preservation",
                "table and formula recognition",
            ],
            configured=bool(self._config.anthropic_api_key),
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
