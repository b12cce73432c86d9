"""
Pytest configuration for pipeline tests.

Provides the per-module logging run, small generated PDFs and in-process
stand-ins for OCR engines and search strategies, so nothing here touches
the network or needs an OCR binary.

Usage:
    pytest testing/
    pytest testing/test_ocr_manager.py -k fallback
"""

import asyncio
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path

import fitz
import pytest

from core.documents import (
    Candidate,
    DocumentContent,
    DocumentMetadata,
    ProcessedDocument,
    ProcessingInfo,
    ProcessingMethod,
)
from core.logging import end_run, start_run
from core.ocr import BaseOCREngine, EngineCost, EngineInfo, OCROptions, OCROutcome
from core.ocr.errors import EngineFailedError
from core.search import BaseSearchStrategy

PROSE_LINES = [
    "Sparse attention reduces the quadratic cost of transformer models.",
    "We evaluate the method on long document classification benchmarks.",
    "The results show consistent gains over dense attention baselines.",
    "Memory usage grows linearly with the input sequence length.",
    "Training remains stable across a wide range of learning rates.",
    "An ablation study isolates the effect of the routing component.",
    "Local windows capture syntax while global tokens carry context.",
    "The implementation runs on commodity hardware without changes.",
    "Future work will extend the approach to streaming inputs.",
    "Code and trained checkpoints are released with this paper.",
    "Each experiment was repeated five times with different seeds.",
    "Reported numbers are the mean and standard deviation of runs.",
]


@pytest.fixture(autouse=True)
def logging_run(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Rotate logs at test module boundaries.

    Each test module gets its own logging run, which triggers log rotation
    on first write to each module's log file.

    When running with pytest-xdist, each worker uses a separate log directory
    to prevent file corruption from concurrent writes.
    """
    import os

    worker_id = os.environ.get("PYTEST_XDIST_WORKER")
    if worker_id:
        os.environ["PDF_LOG_DIR"] = f"logs/test-{worker_id}"

    test_path = request.node.nodeid.split("::")[0]
    test_name = test_path.replace("/", "-").replace(".py", "")
    start_run(f"test-{test_name}")
    yield
    end_run()


def make_pdf(path: Path, pages: list[list[str]], metadata: dict | None = None) -> Path:
    """Write a PDF with one text line per entry; an empty page list entry is a blank page."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        for index, line in enumerate(lines):
            page.insert_text((72, 72 + index * 16), line, fontsize=11)
    if metadata:
        doc.set_metadata(metadata)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def text_pdf(tmp_path) -> Path:
    """Two-page PDF with plenty of clean prose."""
    return make_pdf(
        tmp_path / "text.pdf",
        [PROSE_LINES, list(reversed(PROSE_LINES))],
        metadata={"author": "Ada Lovelace", "title": "Sparse Attention at Scale"},
    )


@pytest.fixture
def blank_pdf(tmp_path) -> Path:
    """Scanned-looking PDF: pages but no text layer."""
    return make_pdf(tmp_path / "blank.pdf", [[], []])


@pytest.fixture
def good_text() -> str:
    return "\n".join(PROSE_LINES * 2)


def candidate(
    id: str = "doc-1",
    url: str = "https://example.org/paper.pdf",
    title: str = "Example Paper",
    source: str = "Web Search",
    relevance: float = 0.5,
    **kwargs,
) -> Candidate:
    return Candidate(
        id=id, title=title, url=url, source=source, relevance_score=relevance, **kwargs
    )


def make_document(id: str = "arxiv-2301.00001", text: str = "Body text.") -> ProcessedDocument:
    return ProcessedDocument(
        id=id,
        title="Sparse Attention",
        url="https://arxiv.org/abs/2301.00001",
        source="arXiv",
        content=DocumentContent(
            text=text, page_count=3, extracted_at=datetime(2024, 1, 1, tzinfo=timezone.utc)
        ),
        metadata=DocumentMetadata(author="Ada Lovelace", file_size=2048),
        processing=ProcessingInfo(
            method=ProcessingMethod.HYBRID,
            ocr_confidence=0.92,
            ocr_engine="claude",
            processing_time_ms=1500,
        ),
    )


class FakeEngine(BaseOCREngine):
    """Scripted engine: returns ``text``, raises ``error`` or sleeps ``delay`` first."""

    def __init__(
        self,
        name: str,
        text: str = "",
        error: Exception | None = None,
        delay: float = 0.0,
        available: bool = True,
        confidence: float = 0.8,
    ):
        self.name = name
        self.text = text
        self.error = error
        self.delay = delay
        self.available = available
        self.confidence = confidence
        self.calls: list[OCROptions] = []
        self.closed = False

    async def is_available(self) -> bool:
        return self.available

    async def process(self, path: Path, options: OCROptions) -> OCROutcome:
        self.calls.append(options)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        if not self.text:
            raise EngineFailedError(f"{self.name} read nothing", provider=self.name)
        return OCROutcome(text=self.text, confidence=self.confidence, engine=self.name)

    def describe(self) -> EngineInfo:
        return EngineInfo(name=self.name, display_name=self.name.title(), cost=EngineCost.FREE)

    async def close(self) -> None:
        self.closed = True


class FakeStrategy(BaseSearchStrategy):
    """Strategy returning canned candidates, or raising ``error``."""

    def __init__(self, name: str, results: list[Candidate] | None = None, error: Exception | None = None):
        super().__init__()
        self.name = name
        self.results = results or []
        self.error = error
        self.calls = 0

    async def _search(self, query, max_results, date_range):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.results)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests requiring external services",
    )
