"""HTTP API for the SEO monitoring service."""

from .app import create_app
from .types import APIError

__all__ = ["create_app", "APIError"]
