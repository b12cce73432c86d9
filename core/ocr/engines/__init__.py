"""OCR engine implementations."""

from .base import BaseOCREngine, HttpPageEngine, PageFanOutEngine
from .claude import ClaudeEngine
from .deepseek import DeepSeekEngine
from .gemini import GeminiEngine
from .marker import MarkerEngine
from .openrouter import OpenRouterEngine
from .rendering import render_pages
from .tesseract import TesseractEngine

__all__ = [
    "BaseOCREngine",
    "PageFanOutEngine",
    "HttpPageEngine",
    "TesseractEngine",
    "ClaudeEngine",
    "GeminiEngine",
    "DeepSeekEngine",
    "OpenRouterEngine",
    "MarkerEngine",
    "render_pages",
]
