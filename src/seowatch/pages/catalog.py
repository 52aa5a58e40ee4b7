"""Page catalog backed by a YAML file."""

from pathlib import Path
from typing import Optional, Union

from ..config.loader import ConfigLoader
from ..utils.logging import get_structured_logger
from .types import PageCatalogError, PageConfig

logger = get_structured_logger(__name__)


class YamlPageCatalog:
    """Read-only view of the pages listed in the catalog file."""

    def __init__(self, source: Union[ConfigLoader, Path, str]):
        if isinstance(source, ConfigLoader):
            self.loader = source
        else:
            self.loader = ConfigLoader(Path(source))
        self._pages: Optional[dict[str, PageConfig]] = None

    def _load(self) -> dict[str, PageConfig]:
        pages: dict[str, PageConfig] = {}
        for entry in self.loader.get_pages_data():
            try:
                page = PageConfig.from_dict(entry)
            except PageCatalogError as e:
                logger.error("Skipping invalid page entry", entry=entry, error=str(e))
                continue

            if page.id in pages:
                logger.warning("Duplicate page id in catalog", page_id=page.id)
                continue
            pages[page.id] = page

        logger.info(
            "Page catalog loaded",
            source=str(self.loader.config_file),
            page_count=len(pages),
        )
        return pages

    def _ensure_loaded(self) -> dict[str, PageConfig]:
        if self._pages is None:
            self._pages = self._load()
        return self._pages

    def reload(self) -> int:
        """Re-read the catalog file and return the number of pages."""
        self._pages = self._load()
        return len(self._pages)

    async def list_pages(self) -> list[PageConfig]:
        return list(self._ensure_loaded().values())

    async def get_page(self, page_id: str) -> Optional[PageConfig]:
        return self._ensure_loaded().get(page_id)


class StaticPageCatalog:
    """In-memory catalog, used when pages are provided programmatically."""

    def __init__(self, pages: list[PageConfig]):
        self._pages = {page.id: page for page in pages}

    async def list_pages(self) -> list[PageConfig]:
        return list(self._pages.values())

    async def get_page(self, page_id: str) -> Optional[PageConfig]:
        return self._pages.get(page_id)
