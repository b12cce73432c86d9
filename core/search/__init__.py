"""Multi-source PDF search.

Usage:
    from core.search import SourceAggregator

    aggregator = SourceAggregator()
    candidates = await aggregator.search("protein folding", max_results=10, sources=["arxiv"])
"""

from .aggregator import ALL_SOURCES, SourceAggregator
from .config import SearchConfig, get_search_config
from .dates import build_date_filter, extract_document_date, filter_by_date
from .errors import ProviderError, SearchError
from .links import extract_pdf_urls, is_probable_pdf_url, title_from_url
from .ranking import dedupe_candidates, rank_candidates
from .strategies import STRATEGY_ORDER, BaseSearchStrategy, build_strategies

__all__ = [
    "SourceAggregator",
    "ALL_SOURCES",
    "STRATEGY_ORDER",
    "BaseSearchStrategy",
    "build_strategies",
    "SearchConfig",
    "get_search_config",
    "SearchError",
    "ProviderError",
    "build_date_filter",
    "extract_document_date",
    "filter_by_date",
    "dedupe_candidates",
    "rank_candidates",
    "extract_pdf_urls",
    "is_probable_pdf_url",
    "title_from_url",
]
