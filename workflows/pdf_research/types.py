"""Result models for PDF discovery and research runs."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.documents import Candidate

AnalysisDepth = Literal["shallow", "medium", "deep"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentDigest(_CamelModel):
    """Research view of one document: summary plus structure counts."""

    id: str
    title: str
    url: str
    source: str
    summary: str
    relevance_score: float
    page_count: int | None = None
    author: str | None = None
    creation_date: str | None = None
    processing_method: str | None = None
    ocr_confidence: float | None = None
    ocr_engine: str | None = None
    sections_count: int = 0
    references_count: int = 0
    figures_count: int = 0
    tables_count: int = 0
    processing_error: bool = False


class ProcessingStats(_CamelModel):
    successful: int = 0
    failed: int = 0
    ocr_used: int = 0


class ResearchInsights(_CamelModel):
    total_documents: int = 0
    source_distribution: dict[str, int] = Field(default_factory=dict)
    average_relevance: float = 0.0
    processing_stats: ProcessingStats = Field(default_factory=ProcessingStats)
    key_findings: list[str] = Field(default_factory=list)


class DiscoveryResult(_CamelModel):
    query: str
    documents: list[Candidate]
    total_found: int
    sources: list[str]
    searched_at: datetime


class ResearchResult(_CamelModel):
    query: str
    documents: list[DocumentDigest]
    total_found: int
    total_processed: int
    insights: ResearchInsights
    analysis_depth: AnalysisDepth
    sources: list[str]
    include_ocr: bool
    force_ocr: bool
    searched_at: datetime
    message: str | None = None
