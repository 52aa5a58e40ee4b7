"""Shared utilities for seowatch."""

from .async_utils import AsyncContextManager, gather_settled
from .logging import get_structured_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_structured_logger",
    "AsyncContextManager",
    "gather_settled",
]
