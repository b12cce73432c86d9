"""
Tests for the per-document pipeline and the research/discovery entry points.

Search and download are stubbed; text extraction and structure analysis run
for real against generated PDFs.
"""

import pytest

from core.documents import ProcessingMethod
from core.ocr import EngineFailedError, EngineRegistry, OCRManager, OCRManagerConfig
from core.search import SearchConfig, SourceAggregator
from core.stores import ResultStore
from workflows.pdf_research import (
    PdfPipeline,
    PipelineConfig,
    discover_pdfs,
    generate_insights,
    research_pdfs,
)
from workflows.pdf_research.research import FAILED_SUMMARY, create_document_summary
from workflows.pdf_research.types import DocumentDigest

from conftest import FakeEngine, FakeStrategy, candidate, make_document

OCR_TEXT = "Recovered text from the scanned page. " * 10


class FakeDownloader:
    """Serves local files by candidate id; unknown ids fail to download."""

    def __init__(self, files: dict):
        self.files = files
        self.requested: list[str] = []
        self.closed = False

    async def download(self, item):
        self.requested.append(item.id)
        return self.files.get(item.id)

    async def close(self):
        self.closed = True


def ocr_manager(*engines) -> OCRManager:
    return OCRManager(
        EngineRegistry(list(engines)),
        OCRManagerConfig(
            primary_engine="auto",
            fallback_engines=[],
            enable_fallback=True,
            fast_mode=False,
            timeout_seconds=5.0,
            total_budget_seconds=None,
        ),
    )


def make_pipeline(tmp_path, files, engines=(), candidates=(), include_ocr=True) -> PdfPipeline:
    aggregator = SourceAggregator(
        config=SearchConfig(),
        strategies={"fake": FakeStrategy("fake", list(candidates))},
    )
    return PdfPipeline(
        config=PipelineConfig(
            store_dir=tmp_path / "store",
            include_ocr=include_ocr,
            ocr_max_pages=2,
            batch_concurrency=1,
            detailed_structure=False,
        ),
        aggregator=aggregator,
        downloader=FakeDownloader(files),
        ocr_manager=ocr_manager(*engines),
        store=ResultStore(tmp_path / "store"),
    )


class TestProcessDocument:
    async def test_text_extraction_without_ocr(self, tmp_path, text_pdf):
        pipeline = make_pipeline(tmp_path, {"doc-1": text_pdf}, include_ocr=False)

        document = await pipeline.process_document(candidate())

        assert document.processing.method == ProcessingMethod.TEXT_EXTRACTION
        assert document.processing.ocr_engine is None
        assert "attention" in document.content.text
        assert document.content.page_count == 2
        assert document.metadata.author == "Ada Lovelace"
        assert pipeline.store.read("doc-1") == document

    async def test_stored_result_is_reused(self, tmp_path, text_pdf):
        pipeline = make_pipeline(tmp_path, {"doc-1": text_pdf}, include_ocr=False)

        first = await pipeline.process_document(candidate())
        second = await pipeline.process_document(candidate())

        assert first == second
        assert pipeline.downloader.requested == ["doc-1"]

    async def test_scanned_pdf_uses_ocr(self, tmp_path, blank_pdf):
        engine = FakeEngine("tesseract", OCR_TEXT, confidence=0.75)
        pipeline = make_pipeline(tmp_path, {"doc-1": blank_pdf}, engines=[engine])

        document = await pipeline.process_document(candidate())

        assert document.processing.method == ProcessingMethod.OCR
        assert document.processing.ocr_engine == "tesseract"
        assert document.processing.ocr_confidence == 0.75
        assert document.content.text == OCR_TEXT
        assert engine.calls[0].max_pages == 2

    async def test_force_ocr_merges_and_bypasses_store(self, tmp_path, text_pdf):
        engine = FakeEngine("claude", OCR_TEXT)
        pipeline = make_pipeline(tmp_path, {"doc-1": text_pdf}, engines=[engine])

        await pipeline.process_document(candidate(), include_ocr=False)
        document = await pipeline.process_document(candidate(), force_ocr=True)

        assert document.processing.method == ProcessingMethod.HYBRID
        assert "--- OCR SUPPLEMENT ---" in document.content.text
        assert pipeline.downloader.requested == ["doc-1", "doc-1"]

    async def test_ocr_failure_keeps_extracted_text(self, tmp_path, blank_pdf):
        engine = FakeEngine("tesseract", error=EngineFailedError("no text", provider="tesseract"))
        pipeline = make_pipeline(tmp_path, {"doc-1": blank_pdf}, engines=[engine])

        document = await pipeline.process_document(candidate())

        assert document.processing.method == ProcessingMethod.TEXT_EXTRACTION
        assert document.content.text == ""
        assert document.processing.ocr_confidence is None

    async def test_no_engines_still_produces_document(self, tmp_path, blank_pdf):
        pipeline = make_pipeline(tmp_path, {"doc-1": blank_pdf})
        document = await pipeline.process_document(candidate())
        assert document.processing.method == ProcessingMethod.TEXT_EXTRACTION

    async def test_download_failure(self, tmp_path):
        pipeline = make_pipeline(tmp_path, {})
        assert await pipeline.process_document(candidate()) is None
        assert not pipeline.store.exists("doc-1")


class TestBatch:
    async def test_results_follow_input_order(self, tmp_path, text_pdf):
        pipeline = make_pipeline(
            tmp_path, {"a": text_pdf, "c": text_pdf}, include_ocr=False
        )
        items = [candidate(id=i, url=f"https://x/{i}.pdf") for i in ("a", "b", "c")]

        results = await pipeline.process_batch(items, concurrency=2)

        assert [r.id if r else None for r in results] == ["a", None, "c"]

    async def test_run_drops_failures(self, tmp_path, text_pdf):
        found = [
            candidate(id="a", url="https://x/a.pdf", relevance=0.9),
            candidate(id="b", url="https://x/b.pdf", relevance=0.8),
        ]
        pipeline = make_pipeline(
            tmp_path, {"a": text_pdf}, candidates=found, include_ocr=False
        )

        documents = await pipeline.run("sparse attention")

        assert [d.id for d in documents] == ["a"]

    async def test_close_closes_collaborators(self, tmp_path):
        engine = FakeEngine("tesseract")
        pipeline = make_pipeline(tmp_path, {}, engines=[engine])
        async with pipeline:
            pass
        assert pipeline.downloader.closed
        assert engine.closed


class TestResearch:
    def found(self):
        return [
            candidate(id="a", url="https://x/a.pdf", source="arXiv", relevance=1.0),
            candidate(id="b", url="https://x/b.pdf", source="arXiv", relevance=0.9),
            candidate(id="c", url="https://x/c.pdf", source="PubMed", relevance=0.8),
            candidate(id="d", url="https://x/d.pdf", source="PubMed", relevance=0.7),
        ]

    async def test_shallow_research(self, tmp_path, text_pdf):
        pipeline = make_pipeline(
            tmp_path, {"a": text_pdf, "c": text_pdf}, candidates=self.found()
        )

        result = await research_pdfs(
            "sparse attention", analysis_depth="shallow", pipeline=pipeline
        )

        assert result.total_found == 4
        assert result.total_processed == 3
        assert [d.id for d in result.documents] == ["a", "b", "c"]

        failed = result.documents[1]
        assert failed.processing_error
        assert failed.summary == FAILED_SUMMARY

        insights = result.insights
        assert insights.source_distribution == {"arXiv": 2, "PubMed": 1}
        assert insights.processing_stats.successful == 2
        assert insights.processing_stats.failed == 1
        assert insights.average_relevance == pytest.approx(0.9)
        assert "High relevance documents found" in insights.key_findings
        assert result.message is None

    async def test_no_results_message(self, tmp_path):
        result = await research_pdfs("nothing", pipeline=make_pipeline(tmp_path, {}))
        assert result.documents == []
        assert result.message == "No PDF documents found for the given query"
        assert result.insights.total_documents == 0

    async def test_result_serializes_camel_case(self, tmp_path):
        result = await research_pdfs("nothing", pipeline=make_pipeline(tmp_path, {}))
        record = result.model_dump(by_alias=True)
        assert "totalFound" in record
        assert "analysisDepth" in record

    async def test_invalid_arguments(self, tmp_path):
        pipeline = make_pipeline(tmp_path, {})
        with pytest.raises(ValueError):
            await research_pdfs("   ", pipeline=pipeline)
        with pytest.raises(ValueError):
            await research_pdfs("query", analysis_depth="exhaustive", pipeline=pipeline)

    async def test_discover(self, tmp_path):
        pipeline = make_pipeline(tmp_path, {}, candidates=self.found())

        result = await discover_pdfs("sparse attention", max_results=2, pipeline=pipeline)

        assert result.total_found == 2
        assert [c.id for c in result.documents] == ["a", "b"]
        assert result.sources == ["all"]
        assert pipeline.downloader.requested == []


class TestSummaries:
    def digest(self, source: str, relevance: float, **kwargs) -> DocumentDigest:
        return DocumentDigest(
            id=source, title="t", url="u", source=source, summary="s",
            relevance_score=relevance, **kwargs,
        )

    def test_moderate_relevance(self):
        insights = generate_insights(
            [self.digest("arXiv", 0.7), self.digest("Web", 0.65, processing_method="ocr")]
        )
        assert "Moderate relevance documents found" in insights.key_findings
        assert "1 documents required OCR processing" in insights.key_findings
        assert insights.key_findings[0] == "Found 2 relevant PDF documents"

    def test_deeper_analysis_keeps_more_sentences(self, tmp_path):
        text = " ".join(f"Sentence number {i} is comfortably long enough." for i in range(12))
        document = make_document(text=text)
        shallow = create_document_summary(document, "shallow")
        deep = create_document_summary(document, "deep")
        assert shallow.count("Sentence number") == 2
        assert deep.count("Sentence number") == 8

    def test_empty_document_summary(self):
        summary = create_document_summary(make_document(text=""), "medium")
        assert summary == "No text content available for this PDF document."
