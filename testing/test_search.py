"""
Tests for search strategies, link extraction and the source aggregator.

HTTP backends are served by httpx.MockTransport.
"""

from datetime import date

import httpx
import pytest

from core.documents import DateRange
from core.search import (
    SearchConfig,
    SourceAggregator,
    dedupe_candidates,
    extract_pdf_urls,
    is_probable_pdf_url,
    rank_candidates,
    title_from_url,
)
from core.search.config import SEARCH_USER_AGENT
from core.search.links import extract_universal_urls, stable_id
from core.search.strategies import (
    SITE_PROFILES,
    ArxivStrategy,
    PubMedStrategy,
    SiteSearchStrategy,
    UniversalSearchStrategy,
    build_strategies,
)
from core.search.strategies.arxiv import parse_arxiv_feed
from core.search.strategies.universal import score_universal_hit

from conftest import FakeStrategy, candidate

ATOM_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/abs/2301.00001v1</id>
    <title>Sparse Attention
      for Long Documents</title>
    <summary>  We propose a sparse attention scheme.  </summary>
    <published>2023-01-02T00:00:00Z</published>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2302.00002v2</id>
    <title>Linear Transformers</title>
    <summary>Kernel feature maps.</summary>
    <published>2023-02-03T00:00:00Z</published>
  </entry>
</feed>
"""


def search_config(**overrides) -> SearchConfig:
    overrides.setdefault("max_attempts", 1)
    overrides.setdefault("pubmed_request_delay", 0.0)
    return SearchConfig(**overrides)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class UnfilteredStrategy(FakeStrategy):
    """Returns its canned results untouched, leaving date filtering to the aggregator."""

    async def search(self, query, max_results=10, date_range=None):
        self.calls += 1
        return list(self.results)


class TestLinks:
    def test_extracts_direct_and_redirect_links(self):
        page = (
            '<a href="https://a.org/x.pdf">A</a>'
            '<a href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fb.org%2Fy.pdf&amp;rut=1">B</a>'
            '<a href="https://a.org/x.pdf">again</a>'
        )
        assert extract_pdf_urls(page) == ["https://a.org/x.pdf", "https://b.org/y.pdf"]

    def test_site_pattern_narrows_matches(self):
        page = "https://ieeexplore.ieee.org/stamp/1.pdf https://other.org/2.pdf"
        pattern = SiteSearchStrategy(SITE_PROFILES["ieee"])._pattern
        assert extract_pdf_urls(page, pattern) == ["https://ieeexplore.ieee.org/stamp/1.pdf"]

    def test_universal_urls_keep_query_strings(self):
        page = '"https://reports.example.com/annual.pdf?version=2"'
        assert extract_universal_urls(page) == ["https://reports.example.com/annual.pdf?version=2"]

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://x.org/a.pdf", True),
            ("https://x.org/view?format=pdf", True),
            ("https://x.org/download/123", True),
            ("https://x.org/about", False),
            ("not a url", False),
        ],
    )
    def test_is_probable_pdf_url(self, url, expected):
        assert is_probable_pdf_url(url) is expected

    def test_title_from_filename(self):
        url = "https://x.org/papers/deep_learning-survey.pdf"
        assert title_from_url(url, "q") == "Deep Learning Survey"

    def test_generic_filename_uses_parent_segment(self):
        url = "https://x.org/annual-report/document1.pdf"
        assert title_from_url(url, "q") == "Annual Report"

    def test_title_falls_back_to_query(self):
        assert title_from_url("https://x.org/1.pdf", "solar power") == "Solar Power - Document"

    def test_stable_id_ignores_case(self):
        assert stable_id("web", "https://X.org/A.pdf") == stable_id("web", "https://x.org/a.pdf")
        assert stable_id("web", "https://x.org/a.pdf").startswith("web-")


class TestRanking:
    def test_dedupe_keeps_first_occurrence(self):
        first = candidate(id="a", url="https://x.org/A.pdf", relevance=0.2)
        second = candidate(id="b", url="https://x.org/a.pdf", relevance=0.9)
        assert dedupe_candidates([first, second]) == [first]

    def test_rank_is_stable(self):
        items = [
            candidate(id="a", url="https://1", relevance=0.5),
            candidate(id="b", url="https://2", relevance=0.9),
            candidate(id="c", url="https://3", relevance=0.5),
        ]
        assert [c.id for c in rank_candidates(items)] == ["b", "a", "c"]

    def test_relevance_is_clamped(self):
        assert candidate(relevance=1.7).relevance_score == 1.0
        assert candidate(relevance=-0.3).relevance_score == 0.0

    def test_universal_scoring(self):
        assert score_universal_hit("https://x.org/a.pdf", 0, "filetype") == pytest.approx(0.9)
        assert score_universal_hit("https://cs.mit.edu/a", 0, "academic") == pytest.approx(0.85)
        assert score_universal_hit("https://x.org/guide", 2, "educational") == pytest.approx(0.7)


class TestArxiv:
    def test_parse_feed(self):
        results = parse_arxiv_feed(ATOM_FEED)

        assert [c.id for c in results] == ["arxiv-2301.00001v1", "arxiv-2302.00002v2"]
        first = results[0]
        assert first.title == "Sparse Attention for Long Documents"
        assert first.download_url == "https://arxiv.org/pdf/2301.00001v1.pdf"
        assert first.relevance_score == 1.0
        assert first.metadata["summary"] == "We propose a sparse attention scheme."
        assert results[1].relevance_score == pytest.approx(0.9)

    def test_old_style_identifier_keeps_archive(self):
        feed = ATOM_FEED.replace("2301.00001v1", "math/0601001v1")
        first = parse_arxiv_feed(feed)[0]

        assert first.id == "arxiv-math/0601001v1"
        assert first.url == "https://arxiv.org/abs/math/0601001v1"
        assert first.download_url == "https://arxiv.org/pdf/math/0601001v1.pdf"

    async def test_old_style_identifier_survives_date_filter(self):
        feed = ATOM_FEED.replace("2301.00001v1", "math/0601001v1")
        window = DateRange(start=date(2006, 1, 1), end=date(2006, 12, 31))

        async with mock_client(lambda request: httpx.Response(200, text=feed)) as client:
            strategy = ArxivStrategy(search_config(), client)
            results = await strategy.search("knots", date_range=window)

        assert [c.id for c in results] == ["arxiv-math/0601001v1"]

    async def test_sends_search_user_agent_with_injected_client(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["user-agent"])
            return httpx.Response(200, text=ATOM_FEED)

        async with mock_client(handler) as client:
            await ArxivStrategy(search_config(), client).search("sparse attention")

        assert seen == [SEARCH_USER_AGENT]

    async def test_strategy_requests_sorted_feed(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, text=ATOM_FEED)

        async with mock_client(handler) as client:
            strategy = ArxivStrategy(search_config(), client)
            results = await strategy.search("sparse attention", max_results=1)

        assert len(results) == 1
        assert seen["sortBy"] == "submittedDate"
        assert seen["search_query"] == "all:sparse attention"

    async def test_server_error_yields_no_results(self):
        async with mock_client(lambda request: httpx.Response(503)) as client:
            strategy = ArxivStrategy(search_config(), client)
            assert await strategy.search("anything") == []


class TestPubMed:
    SUMMARIES = {
        "111": {
            "title": "Malaria vaccines.",
            "pmcrefcount": 3,
            "elocationid": "doi: 10.1000/xyz",
            "pubdate": "2021 Mar",
        },
        "222": {"title": "Second study", "elocationid": "doi: 10.1000/abc.1", "pubdate": "2020"},
        "333": {"title": "Third study", "elocationid": "", "pubdate": "2019"},
    }

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        params = request.url.params
        if path.endswith("esearch.fcgi"):
            return httpx.Response(200, json={"esearchresult": {"idlist": ["111", "222", "333"]}})
        if path.endswith("esummary.fcgi"):
            pmid = params["id"]
            return httpx.Response(200, json={"result": {pmid: self.SUMMARIES[pmid]}})
        if path.endswith("elink.fcgi"):
            return httpx.Response(
                200,
                json={"linksets": [{"linksetdbs": [{"dbto": "pmc", "links": ["98765"]}]}]},
            )
        if request.url.host == "duckduckgo.com":
            return httpx.Response(200, text='<a href="https://europepmc.org/third.pdf">pdf</a>')
        return httpx.Response(404)

    async def test_resolves_pdf_locations(self):
        async with mock_client(self.handler) as client:
            strategy = PubMedStrategy(search_config(), client)
            results = await strategy.search("malaria", max_results=5)

        assert [c.id for c in results] == ["pubmed-111", "pubmed-222", "pubmed-333"]
        pmc, doi, open_access = results
        assert pmc.url == "https://www.ncbi.nlm.nih.gov/pmc/articles/PMC98765/pdf/"
        assert pmc.title == "Malaria vaccines"
        assert pmc.metadata["pmid"] == "111"
        assert doi.url == "https://doi.org/10.1000/abc.1"
        assert open_access.url == "https://europepmc.org/third.pdf"
        assert doi.relevance_score == pytest.approx(0.9)

    async def test_api_key_is_sent(self):
        keys = []

        def handler(request: httpx.Request) -> httpx.Response:
            keys.append(request.url.params.get("api_key"))
            return httpx.Response(200, json={"esearchresult": {"idlist": []}})

        async with mock_client(handler) as client:
            strategy = PubMedStrategy(search_config(ncbi_api_key="secret"), client)
            assert await strategy.search("malaria") == []
        assert keys == ["secret"]


class TestWebStrategies:
    async def test_site_strategy_filters_to_site(self):
        page = (
            '<a href="https://ieeexplore.ieee.org/stamp/123.pdf">x</a>'
            '<a href="https://other.org/a.pdf">y</a>'
        )
        async with mock_client(lambda request: httpx.Response(200, text=page)) as client:
            strategy = SiteSearchStrategy(SITE_PROFILES["ieee"], search_config(), client)
            results = await strategy.search("radar")

        assert [c.url for c in results] == ["https://ieeexplore.ieee.org/stamp/123.pdf"]
        assert results[0].source == "IEEE Xplore"
        assert results[0].relevance_score == pytest.approx(0.9)

    async def test_universal_merges_engines(self):
        page = '<a href="https://mit.edu/notes/lecture.pdf">notes</a>'
        async with mock_client(lambda request: httpx.Response(200, text=page)) as client:
            strategy = UniversalSearchStrategy(search_config(), client)
            results = await strategy.search("fluid dynamics")

        assert len(results) == 1
        hit = results[0]
        assert hit.source == "Universal (DuckDuckGo)"
        assert hit.metadata["strategy"] == "filetype"
        assert hit.metadata["domain"] == "mit.edu"
        assert hit.relevance_score == pytest.approx(0.9)

    def test_build_strategies_order(self):
        names = list(build_strategies(search_config()))
        assert names[:2] == ["arxiv", "pubmed"]
        assert names[-2:] == ["web", "universal"]
        assert len(names) == 10


class TestAggregator:
    def aggregator(self, **strategies) -> SourceAggregator:
        return SourceAggregator(config=search_config(), strategies=strategies)

    async def test_merges_dedupes_and_ranks(self):
        a = FakeStrategy(
            "a",
            [
                candidate(id="a1", url="https://x.org/One.pdf", relevance=0.5),
                candidate(id="a2", url="https://x.org/two.pdf", relevance=0.9),
            ],
        )
        b = FakeStrategy("b", [candidate(id="b1", url="https://x.org/one.pdf", relevance=1.0)])

        results = await self.aggregator(a=a, b=b).search("query")

        assert [c.id for c in results] == ["a2", "a1"]

    async def test_failing_source_contributes_nothing(self):
        ok = FakeStrategy("ok", [candidate(id="ok")])
        broken = FakeStrategy("broken", error=RuntimeError("boom"))
        results = await self.aggregator(ok=ok, broken=broken).search("query")
        assert [c.id for c in results] == ["ok"]

    async def test_source_selection(self):
        a = FakeStrategy("a", [candidate(id="a", url="https://a")])
        b = FakeStrategy("b", [candidate(id="b", url="https://b")])
        aggregator = self.aggregator(a=a, b=b)

        results = await aggregator.search("query", sources=["b", "nonexistent"])

        assert [c.id for c in results] == ["b"]
        assert a.calls == 0
        assert aggregator.select_strategies(["all"]) == ["a", "b"]

    async def test_truncates_to_max_results(self):
        items = [candidate(id=str(i), url=f"https://x/{i}") for i in range(8)]
        results = await self.aggregator(a=FakeStrategy("a", items)).search("q", max_results=3)
        assert len(results) == 3

    async def test_results_are_cached(self):
        a = FakeStrategy("a", [candidate()])
        aggregator = self.aggregator(a=a)

        await aggregator.search("Query")
        await aggregator.search("  query ")
        assert a.calls == 1

        aggregator.clear_cache()
        await aggregator.search("query")
        assert a.calls == 2

    async def test_zero_max_results(self):
        a = FakeStrategy("a", [candidate()])
        assert await self.aggregator(a=a).search("q", max_results=0) == []
        assert a.calls == 0

    async def test_date_range_drops_undated_before_truncating(self):
        a = UnfilteredStrategy(
            "a",
            [
                candidate(id="undated", url="https://x.org/notes.pdf", relevance=1.0),
                candidate(id="old", url="https://x.org/2012/old.pdf", relevance=0.95),
                candidate(id="in-1", url="https://x.org/2020/one.pdf", relevance=0.9),
            ],
        )
        b = UnfilteredStrategy(
            "b",
            [
                candidate(id="dup", url="https://X.org/2020/ONE.pdf", relevance=0.99),
                candidate(id="in-2", url="https://x.org/2021/two.pdf", relevance=0.8),
                candidate(id="in-3", url="https://x.org/2019/three.pdf", relevance=0.7),
            ],
        )
        window = DateRange(start=date(2019, 1, 1), end=date(2021, 12, 31))

        results = await self.aggregator(a=a, b=b).search("q", max_results=2, date_range=window)

        assert [c.id for c in results] == ["in-1", "in-2"]

    async def test_empty_results_are_not_cached(self):
        a = FakeStrategy("a", error=RuntimeError("network down"))
        aggregator = self.aggregator(a=a)

        assert await aggregator.search("query") == []
        a.error = None
        a.results = [candidate()]

        assert [c.id for c in await aggregator.search("query")] == ["doc-1"]
        assert a.calls == 2
