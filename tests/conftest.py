"""Test configuration and fixtures for the seowatch test suite."""

from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
import structlog

from seowatch.config import AlertConfig, AppSettings
from seowatch.notification import NotificationDispatcher
from seowatch.pages import PageConfig, StaticPageCatalog
from seowatch.service import MonitoringService


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep structlog configuration done by one test from leaking into others."""
    yield
    structlog.reset_defaults()


class FakeClock:
    """Controllable replacement for datetime.now."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_crawl_result(status="success", seo_score=85, error_details=None):
    return SimpleNamespace(
        status=status, seo_score=seo_score, error_details=error_details
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 15, 10, 30))


@pytest.fixture
def sample_pages():
    return [
        PageConfig(id="home-en", page_key="home", url_slug="/", locale="en"),
        PageConfig(id="home-fr", page_key="home", url_slug="/", locale="fr"),
        PageConfig(
            id="faq-en",
            page_key="faq",
            url_slug="/faq",
            locale="en",
            canonical_url="https://memopyk.com/faq",
        ),
    ]


@pytest.fixture
def catalog(sample_pages):
    return StaticPageCatalog(sample_pages)


@pytest.fixture
def mock_crawler():
    crawler = Mock(spec=["crawl", "cleanup"])
    crawler.crawl = AsyncMock(return_value=make_crawl_result())
    crawler.cleanup = AsyncMock()
    return crawler


@pytest.fixture
def mock_reporter():
    reporter = Mock(spec=["is_configured", "generate_report", "close"])
    reporter.is_configured = Mock(return_value=True)
    reporter.generate_report = AsyncMock(return_value={"impressions": 10})
    reporter.close = AsyncMock()
    return reporter


@pytest.fixture
def alert_config():
    return AlertConfig()


@pytest.fixture
def mock_dispatcher():
    dispatcher = NotificationDispatcher()
    dispatcher.dispatch = AsyncMock(return_value=[])
    return dispatcher


@pytest.fixture
def app_settings(tmp_path):
    """Settings isolated from the environment and any local .env file."""
    return AppSettings(
        _env_file=None,
        api_tokens=["test-token-123"],
        pages_file=str(tmp_path / "pages.yaml"),
        development=True,
    )


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-token-123"}


@pytest.fixture
def service(
    app_settings, catalog, mock_crawler, mock_reporter, mock_dispatcher, clock
):
    return MonitoringService(
        app_settings,
        catalog=catalog,
        crawler=mock_crawler,
        reporter=mock_reporter,
        dispatcher=mock_dispatcher,
        clock=clock,
    )
