"""Name-to-engine registry injected into the OCR manager."""

import logging
from typing import Iterator

from .config import OCRConfig, get_ocr_config
from .engines import (
    BaseOCREngine,
    ClaudeEngine,
    DeepSeekEngine,
    GeminiEngine,
    MarkerEngine,
    OpenRouterEngine,
    TesseractEngine,
)

logger = logging.getLogger(__name__)


class EngineRegistry:
    """Ordered map of engine name to engine instance.

    Iteration follows registration order, which is the last-resort selection
    order when no priority engine is available.
    """

    def __init__(self, engines: list[BaseOCREngine] | None = None):
        self._engines: dict[str, BaseOCREngine] = {}
        for engine in engines or []:
            self.register(engine)

    def register(self, engine: BaseOCREngine, name: str | None = None) -> None:
        """Register an engine, replacing any engine of the same name."""
        key = name or engine.name
        if not key:
            raise ValueError("Engine must have a name")
        if key in self._engines:
            logger.debug(f"Replacing registered OCR engine: {key}")
        self._engines[key] = engine

    def unregister(self, name: str) -> BaseOCREngine | None:
        return self._engines.pop(name, None)

    def get(self, name: str) -> BaseOCREngine | None:
        return self._engines.get(name)

    def names(self) -> list[str]:
        return list(self._engines)

    def __contains__(self, name: object) -> bool:
        return name in self._engines

    def __iter__(self) -> Iterator[tuple[str, BaseOCREngine]]:
        return iter(list(self._engines.items()))

    def __len__(self) -> int:
        return len(self._engines)

    async def close(self) -> None:
        """Close every engine's connections."""
        for name, engine in self:
            try:
                await engine.close()
            except Exception as e:
                logger.warning(f"Error closing OCR engine {name}: {e}")


def build_default_registry(config: OCRConfig | None = None) -> EngineRegistry:
    """Registry with every built-in engine; availability is checked per call."""
    config = config or get_ocr_config()
    return EngineRegistry(
        [
            TesseractEngine(config),
            ClaudeEngine(config),
            GeminiEngine(config),
            DeepSeekEngine(config),
            OpenRouterEngine(config),
            MarkerEngine(config),
        ]
    )
