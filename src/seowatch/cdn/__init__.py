"""CDN cache invalidation."""

from .manager import CDNManager
from .providers import CloudflareProvider, WebhookProvider
from .types import CDNError, InvalidationResult, InvalidationSummary

__all__ = [
    "CDNManager",
    "CloudflareProvider",
    "WebhookProvider",
    "InvalidationResult",
    "InvalidationSummary",
    "CDNError",
]
