"""Type definitions for CDN cache invalidation."""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol


class CDNError(Exception):
    """Base exception for CDN-related errors."""

    pass


@dataclass
class InvalidationResult:
    """Outcome of one provider's purge request."""

    provider: str
    success: bool
    message: str
    invalidation_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "success": self.success,
            "message": self.message,
            "invalidation_id": self.invalidation_id,
        }


@dataclass
class InvalidationSummary:
    """Combined outcome across all configured providers."""

    success: bool
    results: list[InvalidationResult] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "results": [r.to_dict() for r in self.results],
            "urls": self.urls,
        }


class CDNProvider(Protocol):
    name: str

    async def invalidate_urls(self, urls: list[str]) -> InvalidationResult:
        ...
