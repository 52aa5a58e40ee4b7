"""Tests for the Click command-line interface."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from seowatch.cli import cli
from seowatch.crawler.types import CrawlReport, CrawlStatus


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(app_settings):
    with patch("seowatch.cli.main.get_settings", return_value=app_settings):
        yield app_settings


class TestNextRun:
    def test_daily(self, runner):
        result = runner.invoke(
            cli, ["next-run", "daily", "--from", "2024-01-15 10:30:00"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "2024-01-16 02:00:00"

    def test_monthly_in_december(self, runner):
        result = runner.invoke(
            cli, ["next-run", "MONTHLY", "--from", "2024-12-15 10:30:00"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "2025-01-01 02:00:00"

    def test_unknown_frequency(self, runner):
        result = runner.invoke(cli, ["next-run", "yearly"])

        assert result.exit_code == 2


class TestPagesCommands:
    def test_init_validate_and_list(self, runner, tmp_path):
        path = tmp_path / "pages.yaml"

        init = runner.invoke(cli, ["pages", "init", str(path)])
        assert init.exit_code == 0
        assert "Example page catalog written to" in init.output

        validate = runner.invoke(cli, ["--pages-file", str(path), "pages", "validate"])
        assert validate.exit_code == 0
        assert "Page catalog is valid" in validate.output

        listing = runner.invoke(
            cli, ["--pages-file", str(path), "pages", "list", "--format", "json"]
        )
        assert listing.exit_code == 0
        pages = json.loads(listing.output)
        assert [p["id"] for p in pages] == ["home-en", "home-fr", "faq-en", "faq-fr"]
        assert pages[1]["url"] == "https://memopyk.com/fr/"
        assert pages[2]["url"] == "https://memopyk.com/faq"

    def test_init_refuses_to_overwrite(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "pages.yaml"
        path.write_text("pages: []\n", encoding="utf-8")

        result = runner.invoke(cli, ["pages", "init"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert path.read_text(encoding="utf-8") == "pages: []\n"

    def test_init_force(self, runner, tmp_path):
        path = tmp_path / "pages.yaml"
        path.write_text("pages: []\n", encoding="utf-8")

        result = runner.invoke(cli, ["pages", "init", str(path), "--force"])

        assert result.exit_code == 0
        assert "home-en" in path.read_text(encoding="utf-8")

    def test_validate_reports_issues(self, runner, tmp_path):
        path = tmp_path / "pages.yaml"
        path.write_text(
            "pages:\n  - id: faq\n    url_slug: /faq\n", encoding="utf-8"
        )

        result = runner.invoke(cli, ["--pages-file", str(path), "pages", "validate"])

        assert result.exit_code == 1
        assert "missing required 'page_key' field" in result.output
        assert "Found 1 issue(s) in the page catalog" in result.output

    def test_list_empty_catalog(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["--pages-file", str(tmp_path / "absent.yaml"), "pages", "list"]
        )

        assert result.exit_code == 0
        assert "No pages configured" in result.output


class TestInvalidate:
    def test_without_providers(self, runner):
        result = runner.invoke(cli, ["invalidate", "https://memopyk.com/faq"])

        assert result.exit_code == 0
        assert "Invalidated 1 URL(s)" in result.output

    def test_requires_urls(self, runner):
        result = runner.invoke(cli, ["invalidate"])

        assert result.exit_code == 1
        assert "No URLs to invalidate" in result.output

    def test_unknown_page(self, runner, tmp_path):
        result = runner.invoke(
            cli,
            [
                "--pages-file",
                str(tmp_path / "absent.yaml"),
                "invalidate",
                "--page",
                "ghost",
            ],
        )

        assert result.exit_code == 1
        assert "Page not found: ghost" in result.output


class TestCrawl:
    @pytest.fixture
    def crawler(self):
        report = CrawlReport(
            url="https://memopyk.com/",
            status=CrawlStatus.SUCCESS,
            response_time_ms=420,
            seo_score=72,
            recommendations=["Add a meta description"],
            http_status=200,
        )
        instance = MagicMock()
        instance.crawl = AsyncMock(return_value=report)
        instance.__aenter__ = AsyncMock(return_value=instance)
        instance.__aexit__ = AsyncMock(return_value=False)

        with patch("seowatch.cli.main.SEOCrawler", return_value=instance):
            yield instance

    def test_text_output(self, runner, crawler):
        result = runner.invoke(cli, ["crawl", "https://memopyk.com/"])

        assert result.exit_code == 0
        assert "SEO score: 72/100" in result.output
        assert "  - Add a meta description" in result.output
        crawler.crawl.assert_awaited_once_with("https://memopyk.com/")
        crawler.__aexit__.assert_awaited_once()

    def test_json_output(self, runner, crawler):
        result = runner.invoke(
            cli, ["crawl", "https://memopyk.com/", "--format", "json"]
        )

        assert result.exit_code == 0
        body = json.loads(result.output)
        assert body["status"] == "success"
        assert body["http_status"] == 200
        assert body["seo_score"] == 72

    def test_crawl_failure_exits_non_zero(self, runner, crawler):
        crawler.crawl.side_effect = RuntimeError("browser missing")

        result = runner.invoke(cli, ["crawl", "https://memopyk.com/"])

        assert result.exit_code == 1
        assert "Error: browser missing" in result.output
