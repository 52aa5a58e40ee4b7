"""Headless crawling and on-page SEO scoring."""

from .analysis import SEOAnalyzer
from .browser import SEOCrawler
from .types import CrawlerError, CrawlReport, CrawlStatus, SEOAnalysis

__all__ = [
    "SEOCrawler",
    "SEOAnalyzer",
    "CrawlReport",
    "CrawlStatus",
    "SEOAnalysis",
    "CrawlerError",
]
