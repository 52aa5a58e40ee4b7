"""Collaborator interfaces consumed by the scheduler."""

from typing import Any, Optional, Protocol

from ..pages.types import PageConfig


class CrawlResultProtocol(Protocol):
    """What the scheduler reads from a crawl result."""

    status: Any
    seo_score: Optional[float]
    error_details: Optional[str]


class CrawlerProtocol(Protocol):
    """Fetches a rendered page and scores it."""

    async def crawl(self, url: str) -> CrawlResultProtocol:
        ...


class ReportingProtocol(Protocol):
    """Pulls search-engine reporting data for a URL."""

    def is_configured(self) -> bool:
        ...

    async def generate_report(self, url: str, page_key: str, locale: str) -> Any:
        ...


class PageCatalogProtocol(Protocol):
    """Resolves page ids to page configuration."""

    async def list_pages(self) -> list[PageConfig]:
        ...

    async def get_page(self, page_id: str) -> Optional[PageConfig]:
        ...
