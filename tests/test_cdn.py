"""Tests for CDN cache invalidation."""

from unittest.mock import AsyncMock, Mock

import pytest
from pydantic import SecretStr

from seowatch.cdn import (
    CDNError,
    CDNManager,
    CloudflareProvider,
    InvalidationResult,
    WebhookProvider,
)
from seowatch.config import CDNSettings
from seowatch.pages import PageConfig

URLS = ["https://memopyk.com/faq", "https://memopyk.com/api/sitemap.xml"]


class FakeResponse:
    def __init__(self, status, payload=None):
        self.status = status
        self.payload = payload

    async def json(self, content_type="application/json"):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


def provider(name, result=None, error=None):
    mock = Mock()
    mock.name = name
    mock.invalidate_urls = AsyncMock(return_value=result, side_effect=error)
    return mock


@pytest.fixture
def reporter():
    mock = Mock()
    mock.record_external_service_error = AsyncMock()
    return mock


class TestUrlsForPage:
    def test_canonical_page(self):
        page = PageConfig(
            id="faq-en",
            page_key="faq",
            url_slug="/faq",
            canonical_url="https://memopyk.com/faq",
        )

        assert CDNManager().urls_for_page(page) == URLS

    def test_french_home_page(self):
        page = PageConfig(id="home-fr", page_key="home", url_slug="/", locale="fr")

        assert CDNManager(base_url="https://memopyk.com/").urls_for_page(page) == [
            "https://memopyk.com/fr/",
            "https://memopyk.com/",
            "https://memopyk.com/api/sitemap.xml",
        ]

    def test_french_page_without_canonical(self):
        page = PageConfig(id="faq-fr", page_key="faq", url_slug="/faq", locale="fr")

        assert CDNManager().urls_for_page(page) == [
            "https://memopyk.com/fr/faq",
            "https://memopyk.com/api/sitemap.xml",
        ]


class TestCDNManager:
    @pytest.mark.asyncio
    async def test_empty_url_list_is_rejected(self):
        with pytest.raises(CDNError, match="No URLs to invalidate"):
            await CDNManager().invalidate_urls([])

    @pytest.mark.asyncio
    async def test_no_providers_is_a_no_op(self):
        summary = await CDNManager().invalidate_urls(URLS)

        assert summary.success is True
        assert summary.results == []
        assert summary.urls == URLS

    @pytest.mark.asyncio
    async def test_any_success_is_overall_success(self, reporter):
        ok = provider("Cloudflare", InvalidationResult("Cloudflare", True, "done"))
        bad = provider("Generic", InvalidationResult("Generic", False, "HTTP 502"))
        manager = CDNManager([ok, bad], error_reporter=reporter)

        summary = await manager.invalidate_urls(URLS)

        assert summary.success is True
        assert [r.success for r in summary.results] == [True, False]
        reporter.record_external_service_error.assert_awaited_once_with(
            "cdn", "HTTP 502", {"provider": "Generic", "urls": URLS}
        )

    @pytest.mark.asyncio
    async def test_all_failures(self, reporter):
        first = provider("Cloudflare", error=RuntimeError("connection refused"))
        second = provider("Generic", InvalidationResult("Generic", False, "timeout"))
        manager = CDNManager([first, second], error_reporter=reporter)

        summary = await manager.invalidate_urls(URLS)

        assert summary.success is False
        assert summary.results[0].provider == "Cloudflare"
        assert summary.results[0].message == "connection refused"
        assert reporter.record_external_service_error.await_count == 2

    @pytest.mark.asyncio
    async def test_reporter_errors_are_contained(self, reporter):
        reporter.record_external_service_error.side_effect = RuntimeError("boom")
        bad = provider("Generic", InvalidationResult("Generic", False, "HTTP 500"))

        summary = await CDNManager([bad], error_reporter=reporter).invalidate_urls(URLS)

        assert summary.success is False

    @pytest.mark.asyncio
    async def test_invalidate_page(self):
        ok = provider("Generic", InvalidationResult("Generic", True, "sent"))
        page = PageConfig(id="contact-en", page_key="contact", url_slug="/contact")

        summary = await CDNManager([ok]).invalidate_page(page)

        ok.invalidate_urls.assert_awaited_once_with(
            ["https://memopyk.com/contact", "https://memopyk.com/api/sitemap.xml"]
        )
        assert summary.success is True

    def test_from_settings(self):
        settings = CDNSettings(
            cloudflare_zone_id="zone",
            cloudflare_api_token=SecretStr("cf-token"),
            webhook_url="https://cdn.example.com/purge",
        )

        manager = CDNManager.from_settings(settings)

        assert manager.get_configured_providers() == ["Cloudflare", "Generic"]

    def test_from_settings_requires_credentials(self):
        settings = CDNSettings(cloudflare_zone_id="zone")

        assert CDNManager.from_settings(settings).get_configured_providers() == []


class TestCloudflareProvider:
    @pytest.mark.asyncio
    async def test_success(self):
        session = FakeSession(
            FakeResponse(200, {"success": True, "result": {"id": "purge-1"}})
        )
        cloudflare = CloudflareProvider("zone-1", "cf-token", session=session)

        result = await cloudflare.invalidate_urls(URLS)

        assert result.success is True
        assert result.invalidation_id == "purge-1"
        assert result.message == "Successfully invalidated 2 URLs in Cloudflare"
        url, kwargs = session.calls[0]
        assert url == "https://api.cloudflare.com/client/v4/zones/zone-1/purge_cache"
        assert kwargs["json"] == {"files": URLS}
        assert kwargs["headers"]["Authorization"] == "Bearer cf-token"

    @pytest.mark.asyncio
    async def test_api_failure(self):
        session = FakeSession(
            FakeResponse(
                400, {"success": False, "errors": [{"message": "Invalid zone"}]}
            )
        )

        result = await CloudflareProvider("z", "t", session=session).invalidate_urls(
            URLS
        )

        assert result.success is False
        assert result.message == "Cloudflare invalidation failed: Invalid zone"

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        session = FakeSession(error=OSError("network down"))

        result = await CloudflareProvider("z", "t", session=session).invalidate_urls(
            URLS
        )

        assert result.success is False
        assert result.message == "Cloudflare invalidation error: network down"


class TestWebhookProvider:
    @pytest.mark.asyncio
    async def test_success(self):
        session = FakeSession(FakeResponse(200, {"id": "inv-42"}))
        webhook = WebhookProvider(
            "https://cdn.example.com/purge", api_key="key", session=session
        )

        result = await webhook.invalidate_urls(URLS)

        assert result.success is True
        assert result.invalidation_id == "inv-42"
        _, kwargs = session.calls[0]
        assert kwargs["json"]["action"] == "purge_cache"
        assert kwargs["json"]["urls"] == URLS
        assert kwargs["headers"] == {"Authorization": "Bearer key"}

    @pytest.mark.asyncio
    async def test_non_json_body_gets_generated_id(self):
        session = FakeSession(FakeResponse(202, ValueError("not json")))
        webhook = WebhookProvider("https://cdn.example.com/purge", session=session)

        result = await webhook.invalidate_urls(URLS)

        assert result.success is True
        assert result.invalidation_id.startswith("generic-")
        assert session.calls[0][1]["headers"] == {}

    @pytest.mark.asyncio
    async def test_http_error(self):
        session = FakeSession(FakeResponse(503))
        webhook = WebhookProvider("https://cdn.example.com/purge", session=session)

        result = await webhook.invalidate_urls(URLS)

        assert result.success is False
        assert result.message == "Generic CDN webhook failed with status 503"

    @pytest.mark.asyncio
    async def test_close_leaves_injected_session_open(self):
        session = FakeSession()
        webhook = WebhookProvider("https://cdn.example.com/purge", session=session)

        await webhook.close()

        assert session.closed is False
