"""Type definitions for OCR engines."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from core.documents import clamp_unit


class EngineCost(str, Enum):
    """Cost class of an engine; drives the auto-selection order."""

    FREE = "free"
    PAID_API = "paid-api"
    SELF_HOSTED = "self-hosted"


class OCROptions(BaseModel):
    """Per-call options understood by every engine."""

    language: str = Field(default="eng", description="Tesseract-style language code")
    max_pages: int = Field(default=5, ge=1)
    extract_structure: bool = True
    enhance_accuracy: bool = True
    timeout_seconds: float | None = Field(
        default=None, description="Attempt budget, set by the manager"
    )


class OCROutcome(BaseModel):
    """Result of one engine invocation."""

    text: str
    confidence: float = 0.0
    processing_time_ms: int = 0
    engine: str
    page_count: int | None = None
    language: str | None = None

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_unit(value)


class EngineInfo(BaseModel):
    """Static description of an engine for status reports."""

    name: str
    display_name: str
    version: str = "1.0.0"
    cost: EngineCost
    capabilities: list[str] = Field(default_factory=list)
    configured: bool = False
