"""Catalog of monitored site pages."""

from .catalog import StaticPageCatalog, YamlPageCatalog
from .types import PageCatalogError, PageConfig

__all__ = [
    "PageConfig",
    "PageCatalogError",
    "YamlPageCatalog",
    "StaticPageCatalog",
]
