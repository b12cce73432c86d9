"""OCR manager: engine selection and the fallback chain.

Selection picks the configured primary when it is available, otherwise the
first available engine in ENGINE_PRIORITY, otherwise the first available in
registration order. Processing tries the selected engine and then each
configured fallback, each under its own timeout.
"""

import asyncio
import logging
import time
from dataclasses import replace
from pathlib import Path
from typing import Any

from .config import ENGINE_PRIORITY, FAST_MODE_MAX_PAGES, OCRManagerConfig
from .engines import BaseOCREngine
from .errors import (
    EngineFailedError,
    EngineTimeoutError,
    NoEnginesAvailableError,
    OCRExhaustedError,
)
from .registry import EngineRegistry, build_default_registry
from .types import OCROptions, OCROutcome

logger = logging.getLogger(__name__)


class OCRManager:
    """Runs OCR through registered engines with deterministic fallback.

    Usage:
        manager = OCRManager(build_default_registry(), OCRManagerConfig())
        outcome = await manager.process(Path("paper.pdf"), OCROptions(max_pages=3))
    """

    def __init__(
        self,
        registry: EngineRegistry | None = None,
        config: OCRManagerConfig | None = None,
    ):
        self._registry = registry if registry is not None else build_default_registry()
        self._config = config or OCRManagerConfig()

    @property
    def config(self) -> OCRManagerConfig:
        return self._config

    @property
    def registry(self) -> EngineRegistry:
        return self._registry

    async def _is_available(self, engine: BaseOCREngine) -> bool:
        try:
            return await engine.is_available()
        except Exception as e:
            logger.debug(f"Availability check failed for {engine.name}: {e}")
            return False

    async def available_engines(self) -> list[str]:
        """Names of available engines, in registration order."""
        names = self._registry.names()
        checks = await asyncio.gather(
            *(self._is_available(self._registry.get(name)) for name in names)
        )
        return [name for name, ok in zip(names, checks) if ok]

    async def select_engine(self) -> str:
        """Pick the engine to try first.

        Raises:
            NoEnginesAvailableError: when no registered engine is available
        """
        available = await self.available_engines()
        if not available:
            raise NoEnginesAvailableError("No OCR engines available")

        primary = self._config.primary_engine
        if primary and primary != "auto" and primary in available:
            return primary

        for name in ENGINE_PRIORITY:
            if name in available:
                return name

        return available[0]

    def execution_order(self, selected: str) -> list[str]:
        """Selected engine followed by registered, deduplicated fallbacks."""
        order = [selected]
        if not self._config.enable_fallback:
            return order
        for name in self._config.fallback_engines:
            if name != selected and name in self._registry and name not in order:
                order.append(name)
        return order

    def _effective_options(self, options: OCROptions | None) -> OCROptions:
        options = options or OCROptions()
        updates: dict[str, Any] = {"timeout_seconds": self._config.attempt_timeout}
        if self._config.fast_mode:
            updates["max_pages"] = min(options.max_pages, FAST_MODE_MAX_PAGES)
            updates["enhance_accuracy"] = False
        return options.model_copy(update=updates)

    async def process(self, path: str | Path, options: OCROptions | None = None) -> OCROutcome:
        """OCR a PDF, falling back across engines until one yields text.

        Raises:
            NoEnginesAvailableError: before any attempt, when nothing is available
            OCRExhaustedError: every engine in the order failed or timed out
        """
        path = Path(path)
        options = self._effective_options(options)
        selected = await self.select_engine()
        order = self.execution_order(selected)
        logger.info(f"OCR order for {path.name}: {', '.join(order)}")

        budget = self._config.total_budget_seconds
        started = time.monotonic()
        attempts: list[str] = []
        last_error: Exception | None = None

        for name in order:
            engine = self._registry.get(name)
            if engine is None:
                continue
            if name != selected and not await self._is_available(engine):
                logger.debug(f"Skipping unavailable OCR engine: {name}")
                continue

            timeout = self._config.attempt_timeout
            if budget is not None:
                remaining = budget - (time.monotonic() - started)
                if remaining <= 0:
                    last_error = EngineTimeoutError(
                        f"OCR budget of {budget}s exhausted", provider=name
                    )
                    logger.warning(f"OCR budget exhausted before trying {name}")
                    break
                timeout = min(timeout, remaining)

            attempts.append(name)
            try:
                outcome = await asyncio.wait_for(engine.process(path, options), timeout=timeout)
            except asyncio.TimeoutError:
                last_error = EngineTimeoutError(
                    f"{name} timed out after {timeout:.0f}s", provider=name
                )
                logger.warning(f"OCR engine {name} timed out on {path.name}")
                continue
            except Exception as e:
                last_error = e
                logger.warning(f"OCR engine {name} failed on {path.name}: {e}")
                continue

            if not outcome.text.strip():
                last_error = EngineFailedError(f"{name} returned empty text", provider=name)
                logger.warning(f"OCR engine {name} returned empty text for {path.name}")
                continue

            logger.info(
                f"OCR succeeded with {name} for {path.name} "
                f"(confidence {outcome.confidence:.2f}, {outcome.processing_time_ms}ms)"
            )
            return outcome.model_copy(update={"engine": name})

        detail = str(last_error) if last_error else "no engine could be attempted"
        raise OCRExhaustedError(
            f"All OCR engines failed. Last error: {detail}",
            attempts=attempts,
            provider=attempts[-1] if attempts else None,
        )

    async def engine_status(self) -> dict[str, Any]:
        """Availability report for every registered engine."""
        available = await self.available_engines()
        return {
            "available": available,
            "unavailable": [n for n in self._registry.names() if n not in available],
            "primary": self._config.primary_engine,
            "fallback_enabled": self._config.enable_fallback,
            "fallback_engines": list(self._config.fallback_engines),
            "engines": {
                name: engine.describe().model_dump(mode="json")
                for name, engine in self._registry
            },
        }

    def update_config(self, **changes: Any) -> OCRManagerConfig:
        """Replace configuration fields, e.g. ``update_config(fast_mode=True)``."""
        self._config = replace(self._config, **changes)
        logger.info(f"OCR manager config updated: {sorted(changes)}")
        return self._config

    def add_engine(self, engine: BaseOCREngine, name: str | None = None) -> None:
        self._registry.register(engine, name)
        logger.info(f"Registered OCR engine: {name or engine.name}")

    def remove_engine(self, name: str) -> bool:
        removed = self._registry.unregister(name)
        if removed is not None:
            logger.info(f"Removed OCR engine: {name}")
        return removed is not None

    async def close(self) -> None:
        await self._registry.close()
