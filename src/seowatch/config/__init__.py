"""Configuration management for seowatch."""

from .loader import ConfigLoader, create_example_config
from .settings import (
    AlertConfig,
    AppSettings,
    CDNSettings,
    CrawlerSettings,
    SchedulerSettings,
    SearchConsoleSettings,
    SmtpSettings,
    get_settings,
    reload_settings,
)
from .types import ConfigError, ConfigLoadError

__all__ = [
    "AppSettings",
    "AlertConfig",
    "SchedulerSettings",
    "SmtpSettings",
    "CrawlerSettings",
    "SearchConsoleSettings",
    "CDNSettings",
    "get_settings",
    "reload_settings",
    "ConfigLoader",
    "create_example_config",
    "ConfigError",
    "ConfigLoadError",
]
