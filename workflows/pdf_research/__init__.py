"""PDF research workflow.

Searches academic and web sources for PDFs, downloads them, extracts text
(with OCR fallback for scanned or garbled files), and summarizes the results.
"""

from workflows.pdf_research.config import PipelineConfig, get_pipeline_config
from workflows.pdf_research.pipeline import PdfPipeline
from workflows.pdf_research.research import (
    ANALYSIS_DEPTHS,
    create_document_summary,
    discover_pdfs,
    generate_insights,
    research_pdfs,
)
from workflows.pdf_research.types import (
    DiscoveryResult,
    DocumentDigest,
    ResearchInsights,
    ResearchResult,
)

__all__ = [
    "PdfPipeline",
    "PipelineConfig",
    "get_pipeline_config",
    "discover_pdfs",
    "research_pdfs",
    "create_document_summary",
    "generate_insights",
    "ANALYSIS_DEPTHS",
    "DiscoveryResult",
    "DocumentDigest",
    "ResearchInsights",
    "ResearchResult",
]
