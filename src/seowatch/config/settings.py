"""Pydantic settings models for configuration management."""

from functools import lru_cache
from typing import Annotated, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .types import ConfigError


class SchedulerSettings(BaseModel):
    """Crawl scheduler configuration."""

    tick_interval_seconds: int = 60
    history_limit: int = 1000
    default_frequency: str = "daily"
    base_url: str = "https://memopyk.com"

    @field_validator("tick_interval_seconds", "history_limit")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("default_frequency")
    @classmethod
    def validate_frequency(cls, v):
        valid = ["hourly", "daily", "weekly", "monthly"]
        if v not in valid:
            raise ValueError(f"Frequency must be one of: {valid}")
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")


class AlertConfig(BaseModel):
    """Alert thresholds and notification channel toggles."""

    crawl_failure_threshold: float = 5.0  # percent
    failure_high_threshold: float = 10.0
    failure_critical_threshold: float = 20.0
    response_time_threshold: float = 200.0  # milliseconds
    response_time_high_threshold: float = 1000.0
    email_notifications: bool = False
    slack_notifications: bool = False
    email_recipients: Annotated[list[str], NoDecode] = Field(default_factory=list)
    slack_webhook_url: Optional[str] = None
    dedup_window_seconds: int = 3600
    max_alerts_history: int = 500
    check_interval_seconds: int = 300

    @field_validator("email_recipients", mode="before")
    @classmethod
    def split_recipients(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [r.strip() for r in v.split(",") if r.strip()]
        return v

    @field_validator(
        "crawl_failure_threshold", "failure_high_threshold", "failure_critical_threshold"
    )
    @classmethod
    def validate_percentage(cls, v):
        if v < 0 or v > 100:
            raise ValueError("Percentage thresholds must be between 0 and 100")
        return v

    @field_validator(
        "response_time_threshold",
        "response_time_high_threshold",
        "dedup_window_seconds",
        "max_alerts_history",
        "check_interval_seconds",
    )
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @model_validator(mode="after")
    def validate_escalation_order(self):
        if not (
            self.crawl_failure_threshold
            <= self.failure_high_threshold
            <= self.failure_critical_threshold
        ):
            raise ValueError(
                "Failure thresholds must satisfy alert <= high <= critical"
            )
        return self


class SmtpSettings(BaseModel):
    """SMTP configuration for email alerts."""

    host: str = "localhost"
    port: int = 587
    username: Optional[str] = None
    password: SecretStr = SecretStr("")
    from_address: str = "seo-monitoring@memopyk.com"
    from_name: str = "MEMOPYK SEO Monitoring"
    use_tls: bool = True


class CrawlerSettings(BaseModel):
    """Headless crawler configuration."""

    timeout_ms: int = 30000
    user_agent: str = "Mozilla/5.0 (compatible; MEMOPYK-SEO-Crawler/1.0)"
    viewport_width: int = 1200
    viewport_height: int = 800

    @field_validator("timeout_ms", "viewport_width", "viewport_height")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


class SearchConsoleSettings(BaseModel):
    """Google Search Console credentials."""

    site_url: str = "https://memopyk.com"
    access_token: SecretStr = SecretStr("")
    refresh_token: SecretStr = SecretStr("")
    client_id: str = ""
    client_secret: SecretStr = SecretStr("")
    analytics_days: int = 7
    request_timeout_seconds: float = 30.0


class CDNSettings(BaseModel):
    """CDN providers used for cache invalidation."""

    cloudflare_zone_id: str = ""
    cloudflare_api_token: SecretStr = SecretStr("")
    webhook_url: str = ""
    webhook_api_key: SecretStr = SecretStr("")
    request_timeout_seconds: float = 30.0


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    development: bool = False
    log_level: str = "INFO"
    json_logs: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_tokens: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["dev-token-12345"]
    )
    api_read_tokens: Annotated[list[str], NoDecode] = Field(default_factory=list)
    pages_file: str = "pages.yaml"

    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    alerts: AlertConfig = Field(default_factory=AlertConfig)
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    crawler: CrawlerSettings = Field(default_factory=CrawlerSettings)
    search_console: SearchConsoleSettings = Field(
        default_factory=SearchConsoleSettings
    )
    cdn: CDNSettings = Field(default_factory=CDNSettings)

    @field_validator("api_tokens", "api_read_tokens", mode="before")
    @classmethod
    def split_tokens(cls, v):
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


@lru_cache
def get_settings() -> AppSettings:
    """Get the application settings instance."""
    try:
        return AppSettings()
    except Exception as e:
        raise ConfigError(f"Failed to load settings: {str(e)}") from e


def reload_settings() -> AppSettings:
    """Force reload of settings (useful for testing)."""
    get_settings.cache_clear()
    return get_settings()
