"""Document records shared by every pipeline stage.

Candidate is the ephemeral search hit; ProcessedDocument is the durable,
immutable record written to the result store. The persisted JSON uses the
camelCase aliases (``pageCount``, ``processingTimeMs``, ...).
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def clamp_unit(value: float) -> float:
    """Clamp a score or confidence into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


class ProcessingMethod(str, Enum):
    """Which text source is authoritative for a processed document."""

    TEXT_EXTRACTION = "text-extraction"
    OCR = "ocr"
    HYBRID = "hybrid"


class DateRange(BaseModel):
    """Inclusive publication date window; either bound may be open."""

    model_config = ConfigDict(frozen=True)

    start: date | None = None
    end: date | None = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.start and self.end and self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self


class Candidate(BaseModel):
    """A ranked reference to a document found by a search strategy."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    url: str = Field(description="Canonical URL, used for deduplication")
    source: str
    relevance_score: float = Field(default=0.5, description="Relevance in [0, 1]")
    download_url: str | None = None
    file_size: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("relevance_score")
    @classmethod
    def _clamp_relevance(cls, value: float) -> float:
        return clamp_unit(value)

    @property
    def fetch_url(self) -> str:
        """URL to download from: the direct link when known."""
        return self.download_url or self.url


class Section(BaseModel):
    """A detected heading. Page numbers are not tracked in plain text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    content: str = ""
    page_start: int = Field(default=1, alias="pageStart")
    page_end: int = Field(default=1, alias="pageEnd")
    level: int = Field(default=1, ge=1, le=6)


class DocumentStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    sections: list[Section] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)
    figures: list[str] = Field(default_factory=list)
    tables: list[str] = Field(default_factory=list)
    abstract: str | None = None
    summary: str | None = None


class DocumentContent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str
    page_count: int = Field(default=1, alias="pageCount")
    extracted_at: datetime = Field(alias="extractedAt")


class DocumentMetadata(BaseModel):
    """PDF info dictionary fields plus file statistics."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    author: str | None = None
    title: str | None = None
    subject: str | None = None
    creator: str | None = None
    producer: str | None = None
    creation_date: str | None = Field(default=None, alias="creationDate")
    modification_date: str | None = Field(default=None, alias="modificationDate")
    file_size: int | None = Field(default=None, alias="fileSize")


class ProcessingInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: ProcessingMethod
    ocr_confidence: float | None = Field(default=None, alias="ocrConfidence")
    ocr_engine: str | None = Field(default=None, alias="ocrEngine")
    processing_time_ms: int = Field(default=0, alias="processingTimeMs")

    @field_validator("ocr_confidence")
    @classmethod
    def _clamp_confidence(cls, value: float | None) -> float | None:
        return None if value is None else clamp_unit(value)


class ProcessedDocument(BaseModel):
    """Final record for one document. Re-processing builds a new instance."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    url: str
    source: str
    content: DocumentContent
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    structure: DocumentStructure = Field(default_factory=DocumentStructure)
    processing: ProcessingInfo

    def to_record(self) -> dict[str, Any]:
        """Serialize with camelCase aliases, as persisted."""
        return self.model_dump(mode="json", by_alias=True)
