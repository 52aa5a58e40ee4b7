"""seowatch - SEO crawl scheduling, alerting and CDN invalidation for the site."""

__version__ = "0.1.0"

from .config import get_settings

__all__ = ["get_settings", "__version__"]
