"""Headless Playwright crawler that scores rendered pages."""

import asyncio
import time
from typing import Any, Optional

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config.settings import CrawlerSettings
from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .analysis import SEOAnalyzer
from .types import CrawlerError, CrawlReport, CrawlStatus

logger = get_structured_logger(__name__)

CRAWL_ERROR_RECOMMENDATION = "Fix crawl errors before analyzing SEO"


class SEOCrawler(AsyncContextManager):
    """Crawls a URL with Chromium and returns an SEO report.

    The browser is launched on the first crawl and kept until
    ``cleanup()``.
    """

    def __init__(
        self,
        settings: Optional[CrawlerSettings] = None,
        analyzer: Optional[SEOAnalyzer] = None,
    ):
        self.settings = settings or CrawlerSettings()
        self.analyzer = analyzer or SEOAnalyzer()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._browser_lock = asyncio.Lock()

    async def setup(self) -> None:
        """Launch Playwright and a headless Chromium instance."""
        if self.browser:
            return

        async with self._browser_lock:
            if self.browser:
                return

            logger.info("Launching headless browser")
            try:
                self.playwright = await async_playwright().start()
                self.browser = await self.playwright.chromium.launch(
                    headless=True,
                    args=["--no-sandbox", "--disable-setuid-sandbox"],
                )
            except Exception as e:
                logger.error(f"Failed to launch browser: {str(e)}")
                raise CrawlerError(f"Browser launch failed: {str(e)}") from e

    async def cleanup(self) -> None:
        """Close the browser and stop Playwright."""
        async with self._browser_lock:
            if self.browser:
                await self.browser.close()
                self.browser = None

            if self.playwright:
                await self.playwright.stop()
                self.playwright = None

            logger.info("Headless browser closed")

    async def crawl(self, url: str) -> CrawlReport:
        """Render ``url`` and analyse it. Failures become error reports."""
        started = time.perf_counter()

        try:
            await self.setup()
            return await self._crawl_page(url, started)

        except PlaywrightTimeoutError as e:
            return self._failed_report(url, started, CrawlStatus.TIMEOUT, e)
        except Exception as e:
            return self._failed_report(url, started, CrawlStatus.ERROR, e)

    async def _crawl_page(self, url: str, started: float) -> CrawlReport:
        context = await self.browser.new_context(
            user_agent=self.settings.user_agent,
            viewport={
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
        )

        performance: dict[str, Any] = {
            "load_time_ms": 0,
            "resource_count": 0,
            "network_errors": 0,
            "js_errors": [],
        }

        def on_response(response) -> None:
            performance["resource_count"] += 1
            if not response.ok:
                performance["network_errors"] += 1

        def on_page_error(error) -> None:
            performance["js_errors"].append(str(error))

        try:
            page = await context.new_page()
            page.on("response", on_response)
            page.on("pageerror", on_page_error)

            response = await page.goto(
                url, wait_until="networkidle", timeout=self.settings.timeout_ms
            )
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            performance["load_time_ms"] = elapsed_ms

            if response is None:
                raise CrawlerError("No response received")

            html = await page.content()
        finally:
            await context.close()

        meta = self.analyzer.extract_meta(html)
        analysis = self.analyzer.analyze(html, url)
        score = self.analyzer.calculate_score(analysis)
        recommendations = self.analyzer.generate_recommendations(analysis)

        logger.info(
            "Crawl completed",
            url=url,
            http_status=response.status,
            seo_score=score,
            response_time_ms=elapsed_ms,
        )

        return CrawlReport(
            url=url,
            status=CrawlStatus.SUCCESS,
            http_status=response.status,
            response_time_ms=elapsed_ms,
            meta=meta,
            analysis=analysis,
            seo_score=score,
            recommendations=recommendations,
            performance=performance,
        )

    def _failed_report(
        self, url: str, started: float, status: CrawlStatus, error: Exception
    ) -> CrawlReport:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.warning(
            "Crawl failed", url=url, status=status.value, error=str(error)
        )
        return CrawlReport(
            url=url,
            status=status,
            response_time_ms=elapsed_ms,
            error_details=str(error),
            seo_score=0,
            recommendations=[CRAWL_ERROR_RECOMMENDATION],
        )
