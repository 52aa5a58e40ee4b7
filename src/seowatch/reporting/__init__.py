"""Search-engine reporting integration."""

from .search_console import SearchConsoleClient
from .types import (
    IndexingStatus,
    SearchAnalytics,
    SearchConsoleAuthError,
    SearchConsoleError,
    SearchConsoleReport,
)

__all__ = [
    "SearchConsoleClient",
    "SearchConsoleReport",
    "IndexingStatus",
    "SearchAnalytics",
    "SearchConsoleError",
    "SearchConsoleAuthError",
]
