"""
Tests for date hints, the client-side date filter and query date clauses.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from core.documents import DateRange
from core.search import build_date_filter, extract_document_date, filter_by_date
from core.search.strategies.arxiv import build_arxiv_query
from core.search.strategies.pubmed import build_pubmed_term

from conftest import candidate

TODAY = date(2024, 6, 1)


class TestBuildDateFilter:
    def test_no_range(self):
        assert build_date_filter(None) == ""
        assert build_date_filter(DateRange()) == ""

    def test_same_year(self):
        dr = DateRange(start=date(2021, 1, 1), end=date(2021, 12, 31))
        assert build_date_filter(dr) == "2021"

    def test_year_span(self):
        dr = DateRange(start=date(2019, 3, 1), end=date(2021, 5, 1))
        assert build_date_filter(dr) == "2019..2021"

    def test_open_end_uses_current_year(self):
        dr = DateRange(start=date(2020, 1, 1))
        assert build_date_filter(dr, today=TODAY) == "2020..2024"

    def test_open_start(self):
        assert build_date_filter(DateRange(end=date(2015, 1, 1))) == "2000..2015"

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError):
            DateRange(start=date(2022, 1, 1), end=date(2021, 1, 1))


class TestExtractDocumentDate:
    def test_arxiv_identifier(self):
        c = candidate(url="https://arxiv.org/pdf/2103.01234v2")
        assert extract_document_date(c) == date(2021, 3, 1)

    def test_arxiv_nineties(self):
        c = candidate(url="https://arxiv.org/abs/9912.00001")
        assert extract_document_date(c) == date(1999, 12, 1)

    def test_old_style_arxiv_identifier(self):
        c = candidate(url="https://arxiv.org/abs/math/0601001v1")
        assert extract_document_date(c) == date(2006, 1, 1)

    def test_old_style_arxiv_with_subject_class(self):
        c = candidate(url="https://arxiv.org/pdf/math.GT/9807012")
        assert extract_document_date(c) == date(1998, 7, 1)

    def test_seven_digit_path_elsewhere_is_not_arxiv(self):
        c = candidate(url="https://example.org/papers/0601001.pdf")
        assert extract_document_date(c) is None

    def test_invalid_arxiv_month_falls_through(self):
        c = candidate(url="https://example.org/1913.12345", title="Report from 2005")
        assert extract_document_date(c) == date(2005, 1, 1)

    def test_url_year_segment(self):
        c = candidate(url="https://example.gov/reports/2018/annual.pdf")
        assert extract_document_date(c) == date(2018, 1, 1)

    def test_title_year(self):
        c = candidate(title="Climate Assessment 2016 Final Report")
        assert extract_document_date(c) == date(2016, 1, 1)

    def test_metadata_year(self):
        c = candidate(title="Untitled", metadata={"published": "2011-07-04T00:00:00Z"})
        assert extract_document_date(c) == date(2011, 1, 1)

    def test_no_date(self):
        assert extract_document_date(candidate(title="Untitled")) is None


class TestFilterByDate:
    def test_no_range_keeps_everything(self):
        items = [candidate(title="Untitled")]
        assert filter_by_date(items, None) == items

    def test_undated_candidates_are_dropped(self):
        dr = DateRange(start=date(2010, 1, 1))
        assert filter_by_date([candidate(title="Untitled")], dr) == []

    def test_bounds_are_inclusive(self):
        dr = DateRange(start=date(2018, 1, 1), end=date(2020, 1, 1))
        items = [
            candidate(id="a", title="Paper 2017"),
            candidate(id="b", title="Paper 2018"),
            candidate(id="c", title="Paper 2020"),
            candidate(id="d", title="Paper 2021"),
        ]
        assert [c.id for c in filter_by_date(items, dr)] == ["b", "c"]


class TestQueryClauses:
    def test_arxiv_without_range(self):
        assert build_arxiv_query("graph networks") == "all:graph networks"

    def test_arxiv_closed_range(self):
        dr = DateRange(start=date(2020, 1, 2), end=date(2020, 12, 31))
        assert build_arxiv_query("gnn", dr) == (
            "all:gnn AND submittedDate:[202001020000 TO 202012312359]"
        )

    def test_arxiv_open_bounds(self):
        assert build_arxiv_query("gnn", DateRange(start=date(2020, 1, 1))).endswith(
            "[202001010000 TO 99991231]"
        )
        assert build_arxiv_query("gnn", DateRange(end=date(2020, 1, 1))).endswith(
            "[19910101 TO 202001012359]"
        )

    def test_pubmed_range(self):
        dr = DateRange(start=date(2019, 1, 1), end=date(2020, 6, 30))
        assert build_pubmed_term("malaria", dr) == (
            'malaria AND ("2019/01/01"[Date - Publication] : "2020/06/30"[Date - Publication])'
        )

    def test_pubmed_open_end(self):
        term = build_pubmed_term("malaria", DateRange(start=date(2019, 1, 1)))
        assert term.endswith("3000[Date - Publication]")
