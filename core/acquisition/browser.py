"""Headless-browser PDF fetch for sites that block plain HTTP clients.

Some publishers redirect scripted requests to login or challenge pages but
serve the file to a real browser. The PDF is captured either from the
navigation response or from a triggered download.
"""

import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from .detector import PDF_MAGIC
from .errors import AcquisitionError

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class BrowserFetcher:
    """Lazily started Chromium instance shared by all fetches."""

    def __init__(self):
        self._playwright: "Playwright | None" = None
        self._browser: "Browser | None" = None

    async def _get_browser(self) -> "Browser":
        if self._browser is None:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=True,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--disable-dev-shm-usage",
                    "--no-sandbox",
                ],
            )
            logger.info("Playwright browser started for PDF downloads")
        return self._browser

    async def fetch_pdf(self, url: str, timeout: float = 60.0) -> bytes:
        """Load ``url`` in a browser and return the PDF bytes.

        Raises:
            AcquisitionError: when no PDF could be captured
        """
        browser = await self._get_browser()
        context = await browser.new_context(
            user_agent=BROWSER_USER_AGENT,
            viewport={"width": 1920, "height": 1080},
            accept_downloads=True,
        )
        page = await context.new_page()
        captured: bytes | None = None
        download_triggered = False
        timeout_ms = int(timeout * 1000)

        async def handle_response(response):
            nonlocal captured
            if "application/pdf" in response.headers.get("content-type", ""):
                try:
                    captured = await response.body()
                except Exception as e:
                    logger.debug(f"Failed to capture PDF body: {e}")

        page.on("response", handle_response)

        try:
            response = None
            try:
                response = await page.goto(url, timeout=timeout_ms, wait_until="networkidle")
            except Exception as nav_error:
                if "Download is starting" not in str(nav_error):
                    raise
                download_triggered = True

            if captured and captured[:4] == PDF_MAGIC:
                return captured

            if download_triggered:
                content = await self._capture_download(page, url, timeout_ms)
                if content[:4] == PDF_MAGIC:
                    return content
                raise AcquisitionError("Browser download is not a PDF", provider="browser")

            if response and "application/pdf" in response.headers.get("content-type", ""):
                content = await response.body()
                if content[:4] == PDF_MAGIC:
                    return content

            raise AcquisitionError("Browser got non-PDF content", provider="browser")

        except AcquisitionError:
            raise
        except Exception as e:
            raise AcquisitionError(f"Browser PDF download failed: {e}", provider="browser") from e
        finally:
            await page.close()
            await context.close()

    async def _capture_download(self, page: "Page", url: str, timeout_ms: int) -> bytes:
        download_path: Path | None = None
        try:
            async with page.expect_download(timeout=timeout_ms) as download_info:
                try:
                    await page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
                except Exception:
                    # Navigation aborts once the download starts
                    pass

            download = await download_info.value
            with tempfile.NamedTemporaryFile(delete=False, suffix=".pdf") as tmp:
                download_path = Path(tmp.name)
            await download.save_as(str(download_path))
            return download_path.read_bytes()
        finally:
            if download_path:
                download_path.unlink(missing_ok=True)

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
