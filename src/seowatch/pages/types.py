"""Type definitions for the page catalog."""

from dataclasses import dataclass
from typing import Any, Optional


class PageCatalogError(Exception):
    """Base exception for page catalog errors."""

    pass


SUPPORTED_LOCALES = ("en", "fr")


@dataclass(frozen=True)
class PageConfig:
    """A monitored page of the site."""

    id: str
    page_key: str
    url_slug: str
    locale: str = "en"
    canonical_url: Optional[str] = None

    def __post_init__(self):
        if self.locale not in SUPPORTED_LOCALES:
            raise PageCatalogError(
                f"Unsupported locale '{self.locale}' for page {self.id}"
            )

    @property
    def is_home(self) -> bool:
        return self.page_key == "home"

    def locale_url(self, base_url: str) -> str:
        """URL built from the base, the locale prefix and the slug."""
        base = base_url.rstrip("/")
        slug = self.url_slug if self.url_slug.startswith("/") else f"/{self.url_slug}"
        if self.locale == "fr":
            return f"{base}/fr{slug}"
        return f"{base}{slug}"

    def full_url(self, base_url: str) -> str:
        """Canonical URL when one is set, otherwise the locale URL."""
        if self.canonical_url:
            return self.canonical_url
        return self.locale_url(base_url)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageConfig":
        """Create a page from a catalog entry."""
        try:
            return cls(
                id=str(data["id"]),
                page_key=str(data["page_key"]),
                url_slug=str(data["url_slug"]),
                locale=str(data.get("locale", "en")),
                canonical_url=data.get("canonical_url"),
            )
        except KeyError as e:
            raise PageCatalogError(f"Page entry missing field: {e.args[0]}") from e

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "page_key": self.page_key,
            "url_slug": self.url_slug,
            "locale": self.locale,
        }
        if self.canonical_url:
            data["canonical_url"] = self.canonical_url
        return data
