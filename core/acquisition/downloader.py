"""PDF downloader with local cache, PubMed Central mirrors and browser fallback."""

import hashlib
import logging
import os
import re
from pathlib import Path

import httpx

from core.documents import Candidate
from core.utils import (
    BaseAsyncHttpClient,
    TRANSIENT_HTTP_ERRORS,
    register_cleanup,
    with_retry,
)

from .browser import BrowserFetcher
from .config import AcquisitionConfig, get_acquisition_config
from .detector import pmc_id_from_url, pmc_mirror_urls, validate_pdf_bytes
from .errors import AcquisitionError, DownloadHTTPError, NotAPdfError

logger = logging.getLogger(__name__)

PDF_ACCEPT = "application/pdf,*/*"


def safe_filename(document_id: str) -> str:
    """Filesystem-safe name for a candidate id.

    Ids that need escaping get a hash suffix so two ids never share a file.
    """
    safe = re.sub(r"[^\w.-]", "_", document_id)
    if safe != document_id or not safe:
        digest = hashlib.md5(document_id.encode("utf-8")).hexdigest()[:10]
        safe = f"{safe}-{digest}" if safe else digest
    return safe


class PdfDownloader(BaseAsyncHttpClient):
    """Downloads candidate PDFs into ``download_dir``.

    ``download`` never raises: failures are logged and yield None.

    Usage:
        async with PdfDownloader() as downloader:
            path = await downloader.download(candidate)
    """

    def __init__(
        self,
        config: AcquisitionConfig | None = None,
        client: httpx.AsyncClient | None = None,
        browser: BrowserFetcher | None = None,
    ):
        self._config = config or get_acquisition_config()
        super().__init__(
            timeout=self._config.timeout,
            headers={"Accept": PDF_ACCEPT},
            client=client,
        )
        self._browser = browser

    def local_path(self, candidate: Candidate) -> Path:
        return self._config.download_dir / f"{safe_filename(candidate.id)}.pdf"

    async def download(self, candidate: Candidate) -> Path | None:
        """Fetch the candidate's PDF, reusing an earlier download.

        Returns:
            Path to the local file, or None on failure
        """
        path = self.local_path(candidate)
        if path.exists():
            logger.info(f"PDF already downloaded: {path.name}")
            return path

        url = candidate.fetch_url
        logger.info(f"Downloading PDF: {url}")
        try:
            pmc_id = pmc_id_from_url(url)
            if pmc_id:
                content = await self._download_pmc(pmc_id)
            else:
                content = await self._fetch(url)
        except (AcquisitionError, httpx.HTTPError) as e:
            logger.warning(f"Download failed for '{candidate.title[:60]}': {e}")
            content = await self._browser_fallback(url, e)
            if content is None:
                return None

        return self._save(path, content)

    def _save(self, path: Path, content: bytes) -> Path | None:
        """Write through a ``.part`` file so the cache never holds a partial PDF."""
        part_path = path.with_suffix(".pdf.part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            part_path.write_bytes(content)
            os.replace(part_path, path)
        except OSError as e:
            logger.error(f"Could not save PDF to {path}: {e}")
            try:
                part_path.unlink(missing_ok=True)
            except OSError:
                pass
            return None

        logger.info(f"PDF downloaded: {path.name} ({len(content)} bytes)")
        return path

    async def _fetch(self, url: str, headers: dict[str, str] | None = None) -> bytes:
        """GET and validate one URL.

        Raises:
            DownloadHTTPError: non-success status
            NotAPdfError: payload failed validation
        """
        client = await self._get_client()
        response = await with_retry(
            lambda: client.get(
                url,
                headers=self._request_headers(headers),
                follow_redirects=self.follow_redirects,
            ),
            max_attempts=self._config.max_attempts,
            retry_on=TRANSIENT_HTTP_ERRORS,
            label="PDF download",
        )
        if not response.is_success:
            raise DownloadHTTPError(
                f"Download failed: HTTP {response.status_code}", status_code=response.status_code
            )

        content = response.content
        validate_pdf_bytes(
            content,
            min_bytes=self._config.min_pdf_bytes,
            content_type=response.headers.get("content-type", ""),
        )
        return content

    async def _download_pmc(self, pmc_id: str) -> bytes:
        """Try each PubMed Central mirror until one serves a real PDF."""
        headers = {"Referer": f"https://www.ncbi.nlm.nih.gov/pmc/articles/PMC{pmc_id}/"}
        last_error: Exception | None = None
        for url in pmc_mirror_urls(pmc_id):
            try:
                logger.debug(f"Trying PMC mirror: {url}")
                return await self._fetch(url, headers=headers)
            except (AcquisitionError, httpx.HTTPError) as e:
                last_error = e
                logger.debug(f"PMC mirror failed: {url}: {e}")

        raise AcquisitionError(
            f"All PMC mirrors failed for PMC{pmc_id}: {last_error}", provider="pmc"
        )

    def _blocked(self, error: Exception) -> bool:
        """Failures a real browser may get past."""
        if isinstance(error, DownloadHTTPError):
            return 400 <= error.status_code < 500
        return isinstance(error, (NotAPdfError, httpx.TimeoutException))

    async def _browser_fallback(self, url: str, error: Exception) -> bytes | None:
        if not self._config.browser_fallback or not self._blocked(error):
            return None

        if self._browser is None:
            self._browser = BrowserFetcher()
            register_cleanup("BrowserFetcher", self._browser.close)

        logger.info(f"Retrying download in browser: {url}")
        try:
            content = await self._browser.fetch_pdf(url, timeout=self._config.timeout)
            validate_pdf_bytes(content, min_bytes=self._config.min_pdf_bytes)
            return content
        except AcquisitionError as e:
            logger.warning(f"Browser download failed for {url}: {e}")
            return None

    async def close(self) -> None:
        await super().close()
        if self._browser is not None:
            await self._browser.close()
