"""Google Search Console client used for per-page reporting."""

from datetime import date, datetime, timedelta
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from ..config.settings import SearchConsoleSettings
from ..utils.async_utils import gather_settled
from ..utils.logging import get_structured_logger
from .types import (
    IndexingStatus,
    SearchAnalytics,
    SearchConsoleAuthError,
    SearchConsoleError,
    SearchConsoleReport,
)

logger = get_structured_logger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
INSPECT_URL = "https://searchconsole.googleapis.com/v1/urlInspection/index:inspect"
WEBMASTERS_URL = "https://www.googleapis.com/webmasters/v3/sites"


class SearchConsoleClient:
    """Pulls indexing status, search analytics and mobile usability for URLs.

    Access tokens are refreshed with the OAuth refresh-token grant when
    missing and once more after a 401 response.
    """

    def __init__(
        self,
        settings: Optional[SearchConsoleSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.settings = settings or SearchConsoleSettings()
        self.site_url = self.settings.site_url
        self.client_id = self.settings.client_id
        self._access_token = self.settings.access_token.get_secret_value() or None
        self._refresh_token = self.settings.refresh_token.get_secret_value() or None
        self._client_secret = self.settings.client_secret.get_secret_value() or None
        self._session = session
        self._owns_session = session is None
        self._latest_reports: dict[str, SearchConsoleReport] = {}

    def is_configured(self) -> bool:
        return bool(
            (self._access_token or self._refresh_token)
            and self.client_id
            and self._client_secret
        )

    def get_configuration_status(self) -> dict[str, Any]:
        missing = []
        if not self.client_id:
            missing.append("SEARCH_CONSOLE__CLIENT_ID")
        if not self._client_secret:
            missing.append("SEARCH_CONSOLE__CLIENT_SECRET")
        if not self._refresh_token and not self._access_token:
            missing.append(
                "SEARCH_CONSOLE__REFRESH_TOKEN or SEARCH_CONSOLE__ACCESS_TOKEN"
            )
        return {"configured": not missing, "missing_credentials": missing}

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(
                total=self.settings.request_timeout_seconds
            )
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def refresh_access_token(self) -> Optional[str]:
        if not (self._refresh_token and self.client_id and self._client_secret):
            logger.warning("Missing Search Console credentials for token refresh")
            return None

        data = {
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "refresh_token": self._refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            async with self._get_session().post(TOKEN_URL, data=data) as response:
                if response.status != 200:
                    body = await response.text()
                    logger.error(
                        "Failed to refresh Search Console token",
                        status=response.status,
                        body=body[:200],
                    )
                    return None
                payload = await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"Error refreshing Search Console token: {str(e)}")
            return None

        self._access_token = payload.get("access_token")
        return self._access_token

    async def _request(self, url: str, body: dict[str, Any]) -> dict[str, Any]:
        if not self._access_token and not await self.refresh_access_token():
            raise SearchConsoleAuthError("No valid access token available")

        session = self._get_session()

        async def send() -> tuple[int, Any]:
            headers = {"Authorization": f"Bearer {self._access_token}"}
            async with session.post(url, json=body, headers=headers) as response:
                if response.status == 200:
                    return response.status, await response.json()
                return response.status, await response.text()

        try:
            status, payload = await send()
            if status == 401:
                if not await self.refresh_access_token():
                    raise SearchConsoleAuthError("Authentication failed")
                status, payload = await send()
                if status == 401:
                    raise SearchConsoleAuthError("Authentication failed")
        except aiohttp.ClientError as e:
            raise SearchConsoleError(f"Request failed: {str(e)}") from e

        if status != 200:
            raise SearchConsoleError(f"Search Console API error: {status} - {payload}")
        return payload

    async def _inspect(self, url: str) -> dict[str, Any]:
        return await self._request(
            INSPECT_URL, {"inspectionUrl": url, "siteUrl": self.site_url}
        )

    async def get_indexing_status(self, url: str) -> IndexingStatus:
        response = await self._inspect(url)
        result = response.get("inspectionResult", {}).get("indexStatusResult", {})

        last_crawl = result.get("lastCrawlTime")
        return IndexingStatus(
            indexing_status=result.get("verdict", "unknown"),
            coverage=result.get("coverageState", "unknown"),
            last_crawl_time=(
                datetime.fromisoformat(last_crawl.replace("Z", "+00:00"))
                if last_crawl
                else None
            ),
            crawl_errors=(
                [] if result.get("pageFetchState") == "SUCCESSFUL" else [result]
            ),
        )

    async def get_search_analytics(
        self, url: str, days: Optional[int] = None
    ) -> SearchAnalytics:
        days = days or self.settings.analytics_days
        end = date.today()
        start = end - timedelta(days=days)

        response = await self._request(
            f"{WEBMASTERS_URL}/{quote(self.site_url, safe='')}/searchAnalytics/query",
            {
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "dimensions": ["page"],
                "dimensionFilterGroups": [
                    {
                        "filters": [
                            {"dimension": "page", "operator": "equals", "expression": url}
                        ]
                    }
                ],
                "rowLimit": 1,
            },
        )

        rows = response.get("rows") or [{}]
        row = rows[0]
        return SearchAnalytics(
            impressions=row.get("impressions", 0),
            clicks=row.get("clicks", 0),
            average_position=row.get("position", 0),
            click_through_rate=row.get("ctr", 0),
        )

    async def get_mobile_usability_issues(self, url: str) -> list[Any]:
        response = await self._inspect(url)
        result = response.get("inspectionResult", {}).get("mobileUsabilityResult", {})
        if result.get("verdict") == "PASS":
            return []
        return result.get("issues", [])

    async def generate_report(
        self, url: str, page_key: str, locale: str = "en"
    ) -> SearchConsoleReport:
        """Build a combined report for ``url``.

        Each part falls back to defaults on failure. Raises
        SearchConsoleError only when every part failed.
        """
        logger.info("Generating Search Console report", url=url, page_key=page_key)

        settled = await gather_settled(
            self.get_indexing_status(url),
            self.get_search_analytics(url),
            self.get_mobile_usability_issues(url),
        )
        (indexing, indexing_error), (analytics, analytics_error), (
            mobile,
            mobile_error,
        ) = settled

        errors = [e for e in (indexing_error, analytics_error, mobile_error) if e]
        if len(errors) == len(settled):
            raise SearchConsoleError(
                "; ".join(dict.fromkeys(str(e) for e in errors))
            )

        for name, error in (
            ("indexing", indexing_error),
            ("analytics", analytics_error),
            ("mobile_usability", mobile_error),
        ):
            if error:
                logger.warning(
                    "Search Console request failed", url=url, part=name, error=str(error)
                )

        if indexing is None:
            indexing = IndexingStatus(crawl_errors=[{"error": str(indexing_error)}])
        analytics = analytics or SearchAnalytics()

        report = SearchConsoleReport(
            url=url,
            page_key=page_key,
            locale=locale,
            indexing_status=indexing.indexing_status,
            coverage=indexing.coverage,
            last_crawl_time=indexing.last_crawl_time,
            crawl_errors=indexing.crawl_errors,
            mobile_usability_issues=mobile or [],
            impressions=analytics.impressions,
            clicks=analytics.clicks,
            average_position=analytics.average_position,
            click_through_rate=analytics.click_through_rate,
        )
        self._latest_reports[url] = report
        return report

    def get_latest_report(self, url: str) -> Optional[SearchConsoleReport]:
        return self._latest_reports.get(url)
