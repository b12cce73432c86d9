"""PubMed strategy over NCBI E-utilities.

PubMed indexes abstracts, not files, so each hit is resolved to the most
promising PDF location: a PubMed Central copy, the DOI resolver, or an
open-access copy found by web search.
"""

import asyncio
import logging
import re

from core.documents import Candidate, DateRange

from ..links import extract_pdf_urls
from .base import BaseSearchStrategy

logger = logging.getLogger(__name__)

EUTILS_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"

_DOI = re.compile(r"10\.\d+/[^\s]+")


def build_pubmed_term(query: str, date_range: DateRange | None = None) -> str:
    """esearch term with a ``[Date - Publication]`` range clause."""
    if date_range is None or date_range.is_empty:
        return query

    start = date_range.start.strftime("%Y/%m/%d") if date_range.start else None
    end = date_range.end.strftime("%Y/%m/%d") if date_range.end else None
    if start and end:
        return f'{query} AND ("{start}"[Date - Publication] : "{end}"[Date - Publication])'
    if start:
        return f'{query} AND "{start}"[Date - Publication] : 3000[Date - Publication]'
    return f'{query} AND 1900[Date - Publication] : "{end}"[Date - Publication]'


def extract_doi(elocation_id: str) -> str | None:
    match = _DOI.search(elocation_id or "")
    return match.group(0) if match else None


class PubMedStrategy(BaseSearchStrategy):
    name = "pubmed"

    def _params(self, **params) -> dict:
        if self._config.ncbi_api_key:
            params["api_key"] = self._config.ncbi_api_key
        return params

    async def _search(self, query, max_results, date_range):
        response = await self._get(
            f"{EUTILS_URL}/esearch.fcgi",
            params=self._params(
                db="pubmed",
                term=build_pubmed_term(query, date_range),
                retmax=max_results,
                retmode="json",
                sort="pub_date",
            ),
        )
        pmids = response.json().get("esearchresult", {}).get("idlist", [])
        pmids = pmids[: self._config.pubmed_detail_limit]

        results = []
        for index, pmid in enumerate(pmids):
            candidate = await self._resolve_article(pmid, index)
            if candidate:
                results.append(candidate)
            # E-utilities allow 3 requests/second without a key
            if index < len(pmids) - 1:
                await asyncio.sleep(self._config.pubmed_request_delay)

        return results

    async def _resolve_article(self, pmid: str, index: int) -> Candidate | None:
        try:
            response = await self._get(
                f"{EUTILS_URL}/esummary.fcgi",
                params=self._params(db="pubmed", id=pmid, retmode="json"),
            )
            article = response.json().get("result", {}).get(pmid)
        except Exception as e:
            logger.warning(f"PubMed summary failed for {pmid}: {e}")
            return None
        if not article:
            return None

        title = article.get("title") or f"PubMed Article {pmid}"
        pdf_url = None
        if article.get("pmcrefcount"):
            pdf_url = await self._find_pmc_pdf(pmid)
        if not pdf_url:
            doi = extract_doi(article.get("elocationid", ""))
            if doi:
                pdf_url = f"https://doi.org/{doi}"
        if not pdf_url:
            pdf_url = await self._find_open_access_pdf(title, pmid)

        page_url = f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/"
        return Candidate(
            id=f"pubmed-{pmid}",
            title=title[:-1] if title.endswith(".") else title,
            url=pdf_url or page_url,
            source="PubMed",
            relevance_score=1.0 - index * 0.1,
            download_url=pdf_url,
            metadata={"pmid": pmid, "published": article.get("pubdate", "")},
        )

    async def _find_pmc_pdf(self, pmid: str) -> str | None:
        try:
            response = await self._get(
                f"{EUTILS_URL}/elink.fcgi",
                params=self._params(dbfrom="pubmed", db="pmc", id=pmid, retmode="json"),
            )
            linksets = response.json().get("linksets") or [{}]
            for linkset in linksets[0].get("linksetdbs", []):
                if linkset.get("dbto") == "pmc" and linkset.get("links"):
                    pmc_id = linkset["links"][0]
                    return f"https://www.ncbi.nlm.nih.gov/pmc/articles/PMC{pmc_id}/pdf/"
        except Exception as e:
            logger.warning(f"PMC lookup failed for {pmid}: {e}")
        return None

    async def _find_open_access_pdf(self, title: str, pmid: str) -> str | None:
        query = (
            f'"{title}" filetype:pdf site:ncbi.nlm.nih.gov OR site:europepmc.org '
            "OR site:arxiv.org"
        )
        try:
            urls = extract_pdf_urls(await self._duckduckgo(query))
        except Exception as e:
            logger.warning(f"Open-access lookup failed for {pmid}: {e}")
            return None
        return urls[0] if urls else None
