"""Type definitions for the search reporting module."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


class SearchConsoleError(Exception):
    """Base exception for Search Console errors."""

    pass


class SearchConsoleAuthError(SearchConsoleError):
    """Raised when no valid access token can be obtained."""

    pass


@dataclass
class IndexingStatus:
    indexing_status: str = "error"
    coverage: str = "error"
    last_crawl_time: Optional[datetime] = None
    crawl_errors: list[Any] = field(default_factory=list)


@dataclass
class SearchAnalytics:
    impressions: float = 0
    clicks: float = 0
    average_position: float = 0
    click_through_rate: float = 0


@dataclass
class SearchConsoleReport:
    """Indexing and performance data for one URL."""

    url: str
    page_key: str
    locale: str
    indexing_status: str
    coverage: str
    last_crawl_time: Optional[datetime] = None
    crawl_errors: list[Any] = field(default_factory=list)
    mobile_usability_issues: list[Any] = field(default_factory=list)
    impressions: float = 0
    clicks: float = 0
    average_position: float = 0
    click_through_rate: float = 0
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "page_key": self.page_key,
            "locale": self.locale,
            "indexing_status": self.indexing_status,
            "coverage": self.coverage,
            "last_crawl_time": (
                self.last_crawl_time.isoformat() if self.last_crawl_time else None
            ),
            "crawl_errors": self.crawl_errors,
            "mobile_usability_issues": self.mobile_usability_issues,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "average_position": self.average_position,
            "click_through_rate": self.click_through_rate,
            "generated_at": self.generated_at.isoformat(),
        }
