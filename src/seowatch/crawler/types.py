"""Type definitions for the crawler module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class CrawlerError(Exception):
    """Base exception for crawler-related errors."""

    pass


class CrawlStatus(str, Enum):
    """Status of a single crawl."""

    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass
class TitleAnalysis:
    present: bool = False
    length: int = 0
    optimal: bool = False


@dataclass
class HeadingAnalysis:
    h1_count: int = 0
    structure: bool = False


@dataclass
class ImageAnalysis:
    total: int = 0
    missing_alt: int = 0


@dataclass
class LinkAnalysis:
    internal: int = 0
    external: int = 0


@dataclass
class AccessibilityAnalysis:
    score: int = 0
    issues: list[str] = field(default_factory=list)


@dataclass
class SEOAnalysis:
    """On-page SEO signals extracted from rendered HTML."""

    title: TitleAnalysis = field(default_factory=TitleAnalysis)
    meta_description: TitleAnalysis = field(default_factory=TitleAnalysis)
    headings: HeadingAnalysis = field(default_factory=HeadingAnalysis)
    images: ImageAnalysis = field(default_factory=ImageAnalysis)
    links: LinkAnalysis = field(default_factory=LinkAnalysis)
    accessibility: AccessibilityAnalysis = field(
        default_factory=AccessibilityAnalysis
    )
    mobile_optimized: bool = False


@dataclass
class CrawlReport:
    """Result of crawling and scoring one URL."""

    url: str
    status: CrawlStatus
    response_time_ms: int
    seo_score: int = 0
    recommendations: list[str] = field(default_factory=list)
    http_status: Optional[int] = None
    meta: dict[str, Any] = field(default_factory=dict)
    analysis: Optional[SEOAnalysis] = None
    performance: dict[str, Any] = field(default_factory=dict)
    error_details: Optional[str] = None
    crawled_at: datetime = field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.status == CrawlStatus.SUCCESS
