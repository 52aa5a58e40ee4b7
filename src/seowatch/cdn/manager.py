"""Fan-out of cache purges to every configured CDN provider."""

from collections.abc import Awaitable
from typing import Any, Optional, Protocol

from ..config.settings import CDNSettings
from ..pages.types import PageConfig
from ..utils.async_utils import gather_settled
from ..utils.logging import get_structured_logger
from .providers import CloudflareProvider, WebhookProvider
from .types import CDNError, CDNProvider, InvalidationResult, InvalidationSummary

logger = get_structured_logger(__name__)


class ErrorReporter(Protocol):
    def record_external_service_error(
        self, source: str, message: str, details: Optional[dict[str, Any]] = None
    ) -> Awaitable[Any]:
        ...


class CDNManager:
    """Invalidates cached URLs on all providers concurrently.

    The overall result succeeds when any provider succeeded. Every failed
    provider is reported as an external service error.
    """

    def __init__(
        self,
        providers: Optional[list[CDNProvider]] = None,
        error_reporter: Optional[ErrorReporter] = None,
        base_url: str = "https://memopyk.com",
    ):
        self.providers: list[CDNProvider] = list(providers or [])
        self.error_reporter = error_reporter
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(
        cls,
        settings: CDNSettings,
        error_reporter: Optional[ErrorReporter] = None,
        base_url: str = "https://memopyk.com",
    ) -> "CDNManager":
        providers: list[CDNProvider] = []
        timeout = settings.request_timeout_seconds

        api_token = settings.cloudflare_api_token.get_secret_value()
        if settings.cloudflare_zone_id and api_token:
            providers.append(
                CloudflareProvider(
                    settings.cloudflare_zone_id, api_token, timeout_seconds=timeout
                )
            )

        if settings.webhook_url:
            providers.append(
                WebhookProvider(
                    settings.webhook_url,
                    settings.webhook_api_key.get_secret_value() or None,
                    timeout_seconds=timeout,
                )
            )

        logger.info(
            "CDN providers configured", providers=[p.name for p in providers]
        )
        return cls(providers, error_reporter, base_url)

    def get_configured_providers(self) -> list[str]:
        return [p.name for p in self.providers]

    def urls_for_page(self, page: PageConfig) -> list[str]:
        """URLs whose cached copies depend on the page's SEO settings."""
        urls = []
        if page.canonical_url:
            urls.append(page.canonical_url)

        urls.append(page.locale_url(self.base_url))

        if page.is_home:
            urls.extend([f"{self.base_url}/", f"{self.base_url}/fr/"])

        urls.append(f"{self.base_url}/api/sitemap.xml")
        return list(dict.fromkeys(urls))

    async def invalidate_page(self, page: PageConfig) -> InvalidationSummary:
        return await self.invalidate_urls(self.urls_for_page(page))

    async def invalidate_urls(self, urls: list[str]) -> InvalidationSummary:
        if not urls:
            raise CDNError("No URLs to invalidate")

        if not self.providers:
            logger.info("No CDN providers configured, skipping invalidation")
            return InvalidationSummary(success=True, results=[], urls=list(urls))

        settled = await gather_settled(
            *(provider.invalidate_urls(urls) for provider in self.providers)
        )

        results: list[InvalidationResult] = []
        for provider, (result, error) in zip(self.providers, settled):
            if error is not None:
                result = InvalidationResult(provider.name, False, str(error))
            results.append(result)

        for result in results:
            if not result.success:
                await self._report_failure(result, urls)

        summary = InvalidationSummary(
            success=any(r.success for r in results), results=results, urls=list(urls)
        )
        logger.info(
            "CDN invalidation finished",
            success=summary.success,
            url_count=len(urls),
            results={r.provider: r.success for r in results},
        )
        return summary

    async def _report_failure(self, result: InvalidationResult, urls: list[str]) -> None:
        logger.warning(
            "CDN invalidation failed",
            provider=result.provider,
            message=result.message,
        )
        if self.error_reporter is None:
            return
        try:
            await self.error_reporter.record_external_service_error(
                "cdn",
                result.message,
                {"provider": result.provider, "urls": list(urls)},
            )
        except Exception as e:
            logger.error(f"Failed to record CDN error: {str(e)}")

    async def close(self) -> None:
        for provider in self.providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
