"""Configuration for OCR engines and the fallback manager."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

NORMAL_TIMEOUT_SECONDS = 120.0
FAST_TIMEOUT_SECONDS = 30.0
FAST_MODE_MAX_PAGES = 2

# Cheapest first; used when no primary is named or it is unavailable
ENGINE_PRIORITY = ("deepseek", "openrouter", "claude", "gemini", "marker", "tesseract")


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _env_float(name: str) -> float | None:
    raw = os.environ.get(name)
    return float(raw) if raw else None


@dataclass
class OCRConfig:
    """Credentials and endpoints for individual engines.

    Environment Variables:
        ANTHROPIC_API_KEY / CLAUDE_OCR_MODEL: Claude vision engine
        GOOGLE_API_KEY / GEMINI_MODEL: Gemini vision engine
        DEEPSEEK_API_KEY / DEEPSEEK_MODEL: Tesseract + DeepSeek cleanup engine
        OPENROUTER_API_KEY / OPENROUTER_MODEL: OpenRouter vision engine
        MARKER_BASE_URL / MARKER_INPUT_DIR: self-hosted Marker service
        TESSERACT_CMD: tesseract binary (default: found on PATH)
        OCR_RENDER_DPI: page rasterization resolution (default: 150)
    """

    anthropic_api_key: str | None = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY")
    )
    claude_model: str = field(
        default_factory=lambda: os.environ.get("CLAUDE_OCR_MODEL", "claude-sonnet-4-5-20250929")
    )
    google_api_key: str | None = field(
        default_factory=lambda: os.environ.get("GOOGLE_API_KEY")
    )
    gemini_model: str = field(
        default_factory=lambda: os.environ.get("GEMINI_MODEL", "gemini-2.0-flash")
    )
    deepseek_api_key: str | None = field(
        default_factory=lambda: os.environ.get("DEEPSEEK_API_KEY")
    )
    deepseek_model: str = field(
        default_factory=lambda: os.environ.get("DEEPSEEK_MODEL", "deepseek-chat")
    )
    openrouter_api_key: str | None = field(
        default_factory=lambda: os.environ.get("OPENROUTER_API_KEY")
    )
    openrouter_model: str = field(
        default_factory=lambda: os.environ.get(
            "OPENROUTER_MODEL", "anthropic/claude-3.5-sonnet"
        )
    )
    marker_base_url: str = field(
        default_factory=lambda: os.environ.get("MARKER_BASE_URL", "http://localhost:8001")
    )
    marker_input_dir: str = field(
        default_factory=lambda: os.environ.get("MARKER_INPUT_DIR", "/data/input")
    )
    tesseract_cmd: str | None = field(
        default_factory=lambda: os.environ.get("TESSERACT_CMD")
    )
    render_dpi: int = field(
        default_factory=lambda: int(os.environ.get("OCR_RENDER_DPI", "150"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("OCR_REQUEST_TIMEOUT", "60"))
    )


@dataclass
class OCRManagerConfig:
    """Selection and fallback policy.

    Environment Variables:
        OCR_PRIMARY_ENGINE: engine name or "auto" (default: auto)
        OCR_FALLBACK_ENGINES: comma-separated order (default: claude,gemini,tesseract)
        OCR_ENABLE_FALLBACK: try further engines after a failure (default: true)
        OCR_TIMEOUT: per-attempt timeout in seconds (default: 120, fast mode 30)
        OCR_FAST_MODE: cap pages at 2 and skip accuracy enhancement
        OCR_TOTAL_BUDGET: wall-clock cap across all attempts (default: none)
    """

    primary_engine: str = field(
        default_factory=lambda: os.environ.get("OCR_PRIMARY_ENGINE", "auto")
    )
    fallback_engines: list[str] = field(
        default_factory=lambda: _env_list("OCR_FALLBACK_ENGINES", "claude,gemini,tesseract")
    )
    enable_fallback: bool = field(
        default_factory=lambda: _env_bool("OCR_ENABLE_FALLBACK", "true")
    )
    fast_mode: bool = field(default_factory=lambda: _env_bool("OCR_FAST_MODE"))
    timeout_seconds: float | None = field(default_factory=lambda: _env_float("OCR_TIMEOUT"))
    total_budget_seconds: float | None = field(
        default_factory=lambda: _env_float("OCR_TOTAL_BUDGET")
    )

    @property
    def attempt_timeout(self) -> float:
        """Per-attempt timeout, defaulting by mode when not set explicitly."""
        if self.timeout_seconds is not None:
            return self.timeout_seconds
        return FAST_TIMEOUT_SECONDS if self.fast_mode else NORMAL_TIMEOUT_SECONDS


_config: OCRConfig | None = None


def get_ocr_config() -> OCRConfig:
    """Get global OCRConfig instance."""
    global _config
    if _config is None:
        _config = OCRConfig()
    return _config
