"""Multi-engine OCR with deterministic selection and fallback.

Usage:
    from core.ocr import OCRManager, OCROptions, build_default_registry

    manager = OCRManager(build_default_registry())
    outcome = await manager.process(path, OCROptions(max_pages=3))
"""

from .config import (
    ENGINE_PRIORITY,
    OCRConfig,
    OCRManagerConfig,
    get_ocr_config,
)
from .engines import BaseOCREngine
from .errors import (
    EngineFailedError,
    EngineTimeoutError,
    EngineUnavailableError,
    NoEnginesAvailableError,
    OCRError,
    OCRExhaustedError,
)
from .manager import OCRManager
from .registry import EngineRegistry, build_default_registry
from .types import EngineCost, EngineInfo, OCROptions, OCROutcome

__all__ = [
    "OCRManager",
    "EngineRegistry",
    "build_default_registry",
    "BaseOCREngine",
    "OCRConfig",
    "OCRManagerConfig",
    "get_ocr_config",
    "ENGINE_PRIORITY",
    "OCROptions",
    "OCROutcome",
    "EngineInfo",
    "EngineCost",
    "OCRError",
    "EngineUnavailableError",
    "EngineTimeoutError",
    "EngineFailedError",
    "NoEnginesAvailableError",
    "OCRExhaustedError",
]
