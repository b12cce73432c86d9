"""Configuration for PDF search strategies."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

# Search engines serve simplified HTML to plain browser agents
SEARCH_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass
class SearchConfig:
    """Configuration for the source aggregator.

    Environment Variables:
        NCBI_API_KEY: E-utilities key, raises the PubMed rate limit (optional)
        PDF_SEARCH_TIMEOUT: Request timeout in seconds (default: 30)
        PDF_SEARCH_RETRIES: Attempts per request on transient errors (default: 2)
        PDF_SEARCH_CACHE_TTL: Result cache lifetime in seconds (default: 3600)
    """

    ncbi_api_key: str | None = field(
        default_factory=lambda: os.environ.get("NCBI_API_KEY")
    )
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("PDF_SEARCH_TIMEOUT", "30"))
    )
    max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("PDF_SEARCH_RETRIES", "2"))
    )
    cache_ttl_seconds: int = field(
        default_factory=lambda: int(os.environ.get("PDF_SEARCH_CACHE_TTL", "3600"))
    )
    cache_size: int = 256
    # PubMed: detail lookups per search and the pause between them
    pubmed_detail_limit: int = 5
    pubmed_request_delay: float = 0.2


_config: SearchConfig | None = None


def get_search_config() -> SearchConfig:
    """Get global SearchConfig instance."""
    global _config
    if _config is None:
        _config = SearchConfig()
    return _config
