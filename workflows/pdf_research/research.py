"""PDF discovery and research: search, process the top hits, summarize.

Usage:
    result = await research_pdfs("retrieval augmented generation", analysis_depth="shallow")
    print(result.insights.key_findings)
"""

import logging
from collections import Counter
from datetime import datetime, timezone

from core.documents import Candidate, DateRange, ProcessedDocument, ProcessingMethod
from core.extraction import summarize_sentences

from .pipeline import PdfPipeline
from .types import (
    AnalysisDepth,
    DiscoveryResult,
    DocumentDigest,
    ProcessingStats,
    ResearchInsights,
    ResearchResult,
)

logger = logging.getLogger(__name__)

# depth -> (documents processed, summary sentences)
ANALYSIS_DEPTHS: dict[str, tuple[int, int]] = {
    "shallow": (3, 2),
    "medium": (5, 4),
    "deep": (10, 8),
}

FAILED_SUMMARY = "PDF processing failed - document available for manual review"
EMPTY_SUMMARY = "No text content available for this PDF document."
UNSUMMARIZED = "Content available but summary extraction failed."


def _check_query(query: str) -> str:
    if not isinstance(query, str) or not query.strip():
        raise ValueError("Query is required and must be a non-empty string")
    return query.strip()


def create_document_summary(document: ProcessedDocument, depth: AnalysisDepth = "medium") -> str:
    """Leading sentences of the document text; more for deeper analysis."""
    text = document.content.text
    if not text:
        return EMPTY_SUMMARY
    _, sentence_count = ANALYSIS_DEPTHS.get(depth, ANALYSIS_DEPTHS["medium"])
    summary = ". ".join(summarize_sentences(text, sentence_count)).strip()
    return summary or UNSUMMARIZED


def digest_document(
    candidate: Candidate,
    document: ProcessedDocument | None,
    depth: AnalysisDepth,
) -> DocumentDigest:
    if document is None:
        return DocumentDigest(
            id=candidate.id,
            title=candidate.title,
            url=candidate.url,
            source=candidate.source,
            summary=FAILED_SUMMARY,
            relevance_score=candidate.relevance_score,
            processing_error=True,
        )

    structure = document.structure
    return DocumentDigest(
        id=document.id,
        title=document.title,
        url=document.url,
        source=document.source,
        summary=create_document_summary(document, depth),
        relevance_score=candidate.relevance_score,
        page_count=document.content.page_count,
        author=document.metadata.author,
        creation_date=document.metadata.creation_date,
        processing_method=document.processing.method.value,
        ocr_confidence=document.processing.ocr_confidence,
        ocr_engine=document.processing.ocr_engine,
        sections_count=len(structure.sections),
        references_count=len(structure.references),
        figures_count=len(structure.figures),
        tables_count=len(structure.tables),
    )


def generate_insights(documents: list[DocumentDigest]) -> ResearchInsights:
    """Source distribution, mean relevance, processing stats and key findings."""
    if not documents:
        return ResearchInsights()

    sources = Counter(doc.source for doc in documents)
    ocr_methods = {ProcessingMethod.OCR.value, ProcessingMethod.HYBRID.value}
    stats = ProcessingStats(
        successful=sum(1 for doc in documents if not doc.processing_error),
        failed=sum(1 for doc in documents if doc.processing_error),
        ocr_used=sum(
            1
            for doc in documents
            if not doc.processing_error and doc.processing_method in ocr_methods
        ),
    )
    average = sum(doc.relevance_score for doc in documents) / len(documents)

    findings = [f"Found {len(documents)} relevant PDF documents"]
    top_source, top_count = sources.most_common(1)[0]
    findings.append(f"Primary source: {top_source} ({top_count} documents)")
    if stats.ocr_used:
        findings.append(f"{stats.ocr_used} documents required OCR processing")
    if average > 0.8:
        findings.append("High relevance documents found")
    elif average > 0.6:
        findings.append("Moderate relevance documents found")

    return ResearchInsights(
        total_documents=len(documents),
        source_distribution=dict(sources),
        average_relevance=average,
        processing_stats=stats,
        key_findings=findings,
    )


async def discover_pdfs(
    query: str,
    max_results: int = 20,
    sources: list[str] | None = None,
    date_range: DateRange | None = None,
    pipeline: PdfPipeline | None = None,
) -> DiscoveryResult:
    """Find PDFs without downloading or processing them."""
    query = _check_query(query)
    sources = sources or ["all"]
    logger.info(f"Starting PDF discovery for: {query}")

    owns_pipeline = pipeline is None
    pipeline = pipeline or PdfPipeline()
    try:
        candidates = await pipeline.search(query, max_results, sources, date_range)
    finally:
        if owns_pipeline:
            await pipeline.close()

    logger.info(f"PDF discovery found {len(candidates)} documents for: {query}")
    return DiscoveryResult(
        query=query,
        documents=candidates,
        total_found=len(candidates),
        sources=sources,
        searched_at=datetime.now(timezone.utc),
    )


async def research_pdfs(
    query: str,
    max_documents: int = 10,
    sources: list[str] | None = None,
    date_range: DateRange | None = None,
    include_ocr: bool = False,
    force_ocr: bool = False,
    analysis_depth: AnalysisDepth = "medium",
    pipeline: PdfPipeline | None = None,
) -> ResearchResult:
    """Search, process the top documents for the depth, and summarize.

    Documents that fail to process are still listed, flagged with
    ``processing_error`` and a placeholder summary.
    """
    query = _check_query(query)
    if analysis_depth not in ANALYSIS_DEPTHS:
        raise ValueError(f"Unknown analysis depth: {analysis_depth}")
    sources = sources or ["all"]
    logger.info(f"Starting PDF research for: {query} ({analysis_depth})")

    owns_pipeline = pipeline is None
    pipeline = pipeline or PdfPipeline()
    try:
        candidates = await pipeline.search(query, max_documents, sources, date_range)
        to_process = candidates[: ANALYSIS_DEPTHS[analysis_depth][0]]
        processed = await pipeline.process_batch(to_process, include_ocr, force_ocr)
    finally:
        if owns_pipeline:
            await pipeline.close()

    digests = [
        digest_document(candidate, document, analysis_depth)
        for candidate, document in zip(to_process, processed)
    ]
    logger.info(f"PDF research processed {len(digests)} documents for: {query}")

    return ResearchResult(
        query=query,
        documents=digests,
        total_found=len(candidates),
        total_processed=len(digests),
        insights=generate_insights(digests),
        analysis_depth=analysis_depth,
        sources=sources,
        include_ocr=include_ocr,
        force_ocr=force_ocr,
        searched_at=datetime.now(timezone.utc),
        message=None if candidates else "No PDF documents found for the given query",
    )
