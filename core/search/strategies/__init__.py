"""Search strategy registry."""

from ..config import SearchConfig
from .arxiv import ArxivStrategy
from .base import BaseSearchStrategy
from .pubmed import PubMedStrategy
from .universal import UniversalSearchStrategy
from .web import SITE_PROFILES, SiteProfile, SiteSearchStrategy, WebSearchStrategy

# Order results are concatenated in before ranking
STRATEGY_ORDER = [
    "arxiv",
    "pubmed",
    "ieee",
    "scholar",
    "researchgate",
    "ssrn",
    "government",
    "technical",
    "web",
    "universal",
]


def build_strategies(config: SearchConfig | None = None, client=None) -> dict[str, BaseSearchStrategy]:
    """Every built-in strategy keyed by name, in STRATEGY_ORDER."""
    strategies: dict[str, BaseSearchStrategy] = {}
    for name in STRATEGY_ORDER:
        if name == "arxiv":
            strategies[name] = ArxivStrategy(config, client)
        elif name == "pubmed":
            strategies[name] = PubMedStrategy(config, client)
        elif name == "web":
            strategies[name] = WebSearchStrategy(config, client)
        elif name == "universal":
            strategies[name] = UniversalSearchStrategy(config, client)
        else:
            strategies[name] = SiteSearchStrategy(SITE_PROFILES[name], config, client)
    return strategies


__all__ = [
    "BaseSearchStrategy",
    "ArxivStrategy",
    "PubMedStrategy",
    "WebSearchStrategy",
    "SiteSearchStrategy",
    "SiteProfile",
    "SITE_PROFILES",
    "UniversalSearchStrategy",
    "STRATEGY_ORDER",
    "build_strategies",
]
