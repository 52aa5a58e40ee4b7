"""YAML loading and persistence for the page catalog file."""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from .types import ConfigError, ConfigLoadError

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and saves the YAML file that lists monitored pages."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else Path("pages.yaml")

    def load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_file.exists():
            logger.warning(f"Config file {self.config_file} not found, using defaults")
            return {}

        try:
            with open(self.config_file, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}

            if not isinstance(config, dict):
                raise ConfigLoadError(
                    f"Top level of {self.config_file} must be a mapping"
                )

            logger.info(f"Loaded configuration from {self.config_file}")
            return config

        except ConfigLoadError:
            raise
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML config: {str(e)}") from e
        except Exception as e:
            raise ConfigLoadError(f"Failed to load config file: {str(e)}") from e

    def save_yaml_config(self, config: dict[str, Any]) -> None:
        """Save configuration to YAML file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_file, "w", encoding="utf-8") as f:
                yaml.dump(
                    config, f, default_flow_style=False, indent=2, sort_keys=False
                )

            logger.info(f"Saved configuration to {self.config_file}")

        except Exception as e:
            raise ConfigError(f"Failed to save config file: {str(e)}") from e

    def get_pages_data(self) -> list[dict[str, Any]]:
        """Return the raw page entries from the ``pages`` section."""
        config = self.load_yaml_config()
        pages = config.get("pages", []) or []
        if not isinstance(pages, list):
            raise ConfigLoadError("The 'pages' section must be a list")
        return pages

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        try:
            config = self.load_yaml_config()
        except Exception as e:
            return [f"Failed to load config: {str(e)}"]

        pages = config.get("pages", [])
        if not isinstance(pages, list):
            return ["The 'pages' section must be a list"]

        seen_ids = set()
        for i, page in enumerate(pages):
            if not isinstance(page, dict):
                issues.append(f"Page {i} is not a valid object")
                continue

            for field in ("id", "page_key", "url_slug"):
                if field not in page:
                    issues.append(f"Page {i} missing required '{field}' field")

            page_id = str(page.get("id", ""))
            if page_id and page_id in seen_ids:
                issues.append(f"Page {i} has duplicate id: {page_id}")
            seen_ids.add(page_id)

            locale = page.get("locale", "en")
            if locale not in ("en", "fr"):
                issues.append(f"Page {i} has unsupported locale: {locale}")

            slug = page.get("url_slug")
            if isinstance(slug, str) and not slug.startswith("/"):
                issues.append(f"Page {i} url_slug must start with '/': {slug}")

        return issues


def create_example_config(config_path: Path) -> None:
    """Create an example page catalog file."""
    example_config = {
        "pages": [
            {"id": "home-en", "page_key": "home", "url_slug": "/", "locale": "en"},
            {"id": "home-fr", "page_key": "home", "url_slug": "/", "locale": "fr"},
            {
                "id": "faq-en",
                "page_key": "faq",
                "url_slug": "/faq",
                "locale": "en",
                "canonical_url": "https://memopyk.com/faq",
            },
            {"id": "faq-fr", "page_key": "faq", "url_slug": "/faq", "locale": "fr"},
        ]
    }

    loader = ConfigLoader(config_path)
    loader.save_yaml_config(example_config)
