"""Per-document pipeline: download, extract, gate, OCR, merge, analyze, persist."""

import asyncio
import logging
import time
from datetime import datetime, timezone

from core.acquisition import PdfDownloader
from core.documents import (
    Candidate,
    DateRange,
    DocumentContent,
    ProcessedDocument,
    ProcessingInfo,
)
from core.extraction import (
    analyze_structure,
    decide_ocr,
    extract_metadata,
    extract_text,
    get_page_count,
    merge_content,
)
from core.ocr import OCRError, OCRManager, OCROptions, OCROutcome
from core.search import SourceAggregator
from core.stores import ResultStore
from core.utils import AsyncContextManager
from workflows.shared.async_utils import map_with_concurrency

from .config import PipelineConfig, get_pipeline_config

logger = logging.getLogger(__name__)


class PdfPipeline(AsyncContextManager):
    """Turns search candidates into stored ProcessedDocuments.

    Collaborators are created lazily when not injected, so a pipeline that
    never needs OCR never builds engine clients.

    Usage:
        async with PdfPipeline() as pipeline:
            documents = await pipeline.run("sparse attention", max_results=5)
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        aggregator: SourceAggregator | None = None,
        downloader: PdfDownloader | None = None,
        ocr_manager: OCRManager | None = None,
        store: ResultStore | None = None,
    ):
        self._config = config or get_pipeline_config()
        self._aggregator = aggregator
        self._downloader = downloader
        self._ocr_manager = ocr_manager
        self._store = store or ResultStore(self._config.store_dir)

    @property
    def aggregator(self) -> SourceAggregator:
        if self._aggregator is None:
            self._aggregator = SourceAggregator()
        return self._aggregator

    @property
    def downloader(self) -> PdfDownloader:
        if self._downloader is None:
            self._downloader = PdfDownloader()
        return self._downloader

    @property
    def ocr_manager(self) -> OCRManager:
        if self._ocr_manager is None:
            self._ocr_manager = OCRManager()
        return self._ocr_manager

    @property
    def store(self) -> ResultStore:
        return self._store

    async def search(
        self,
        query: str,
        max_results: int = 10,
        sources: list[str] | None = None,
        date_range: DateRange | None = None,
    ) -> list[Candidate]:
        return await self.aggregator.search(query, max_results, sources, date_range)

    async def process_document(
        self,
        candidate: Candidate,
        include_ocr: bool | None = None,
        force_ocr: bool = False,
        bypass_text_check: bool = False,
        ocr_options: OCROptions | None = None,
    ) -> ProcessedDocument | None:
        """Process one candidate end to end.

        A stored record is reused unless OCR is forced. Any failure is logged
        and yields None.
        """
        logger.info(f"Processing PDF: {candidate.title}")
        try:
            return await self._process(
                candidate,
                self._config.include_ocr if include_ocr is None else include_ocr,
                force_ocr,
                bypass_text_check,
                ocr_options,
            )
        except Exception as e:
            logger.error(f"Failed to process PDF '{candidate.title}': {e}", exc_info=True)
            return None

    async def _process(
        self,
        candidate: Candidate,
        include_ocr: bool,
        force_ocr: bool,
        bypass_text_check: bool,
        ocr_options: OCROptions | None,
    ) -> ProcessedDocument | None:
        start = time.monotonic()

        if force_ocr:
            logger.info(f"Skipping stored result due to forced OCR: {candidate.id}")
        else:
            stored = self._store.read(candidate.id)
            if stored is not None:
                logger.info(f"Using stored result: {candidate.id}")
                return stored

        path = await self.downloader.download(candidate)
        if path is None:
            logger.warning(f"Failed to download PDF: {candidate.title}")
            return None

        extracted = await asyncio.to_thread(extract_text, path)

        outcome: OCROutcome | None = None
        verdict = decide_ocr(
            extracted,
            include_ocr=include_ocr,
            force_ocr=force_ocr,
            bypass_text_check=bypass_text_check,
        )
        if verdict.needs_ocr:
            logger.info(f"Attempting OCR for '{candidate.title}' ({verdict.reason})")
            options = ocr_options or OCROptions(max_pages=self._config.ocr_max_pages)
            try:
                outcome = await self.ocr_manager.process(path, options)
            except OCRError as e:
                logger.warning(f"OCR failed for '{candidate.title}': {e}")

        merged = merge_content(extracted, outcome)
        metadata = await asyncio.to_thread(extract_metadata, path)
        page_count = await asyncio.to_thread(get_page_count, path)
        structure = analyze_structure(merged.text, detailed=self._config.detailed_structure)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        document = ProcessedDocument(
            id=candidate.id,
            title=candidate.title,
            url=candidate.url,
            source=candidate.source,
            content=DocumentContent(
                text=merged.text,
                page_count=page_count,
                extracted_at=datetime.now(timezone.utc),
            ),
            metadata=metadata,
            structure=structure,
            processing=ProcessingInfo(
                method=merged.method,
                ocr_confidence=merged.ocr_confidence,
                ocr_engine=merged.ocr_engine,
                processing_time_ms=elapsed_ms,
            ),
        )
        self._store.write(document)
        logger.info(
            f"Processed PDF '{candidate.title}' via {merged.method.value} ({elapsed_ms}ms)"
        )
        return document

    async def process_batch(
        self,
        candidates: list[Candidate],
        include_ocr: bool | None = None,
        force_ocr: bool = False,
        concurrency: int | None = None,
    ) -> list[ProcessedDocument | None]:
        """Process candidates, returning results in input order.

        Sequential unless ``concurrency`` (or PDF_BATCH_CONCURRENCY) is above 1.
        A failed document yields None; the batch never aborts.
        """
        limit = concurrency or self._config.batch_concurrency
        if limit <= 1:
            results = []
            for index, candidate in enumerate(candidates, start=1):
                logger.info(f"Processing PDF {index}/{len(candidates)}")
                results.append(await self.process_document(candidate, include_ocr, force_ocr))
            return results

        return await map_with_concurrency(
            lambda c: self.process_document(c, include_ocr, force_ocr),
            candidates,
            max_concurrent=limit,
            describe=lambda c: f"'{c.title}'",
        )

    async def run(
        self,
        query: str,
        max_results: int = 10,
        sources: list[str] | None = None,
        date_range: DateRange | None = None,
        include_ocr: bool | None = None,
        force_ocr: bool = False,
    ) -> list[ProcessedDocument]:
        """Search, then process every candidate; failed documents are dropped."""
        candidates = await self.search(query, max_results, sources, date_range)
        results = await self.process_batch(candidates, include_ocr, force_ocr)
        return [document for document in results if document is not None]

    async def close(self) -> None:
        if self._aggregator is not None:
            await self._aggregator.close()
        if self._downloader is not None:
            await self._downloader.close()
        if self._ocr_manager is not None:
            await self._ocr_manager.close()
