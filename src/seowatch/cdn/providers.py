"""HTTP purge clients for CDN providers."""

import time
from datetime import datetime, timezone
from typing import Optional

import aiohttp

from ..utils.logging import get_structured_logger
from .types import InvalidationResult

logger = get_structured_logger(__name__)

CLOUDFLARE_API = "https://api.cloudflare.com/client/v4"


class _HTTPProvider:
    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: float = 30.0,
    ):
        self._session = session
        self._owns_session = session is None
        self.timeout_seconds = timeout_seconds

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


class CloudflareProvider(_HTTPProvider):
    """Purges files through the Cloudflare zone API."""

    name = "Cloudflare"

    def __init__(self, zone_id: str, api_token: str, **kwargs):
        super().__init__(**kwargs)
        self.zone_id = zone_id
        self.api_token = api_token

    async def invalidate_urls(self, urls: list[str]) -> InvalidationResult:
        endpoint = f"{CLOUDFLARE_API}/zones/{self.zone_id}/purge_cache"
        headers = {"Authorization": f"Bearer {self.api_token}"}

        try:
            async with self._get_session().post(
                endpoint, json={"files": urls}, headers=headers
            ) as response:
                result = await response.json(content_type=None)
                ok = response.status < 400
        except Exception as e:
            return InvalidationResult(
                self.name, False, f"Cloudflare invalidation error: {str(e)}"
            )

        result = result or {}
        if ok and result.get("success"):
            return InvalidationResult(
                self.name,
                True,
                f"Successfully invalidated {len(urls)} URLs in Cloudflare",
                (result.get("result") or {}).get("id"),
            )

        errors = result.get("errors") or [{}]
        return InvalidationResult(
            self.name,
            False,
            f"Cloudflare invalidation failed: {errors[0].get('message', 'Unknown error')}",
        )


class WebhookProvider(_HTTPProvider):
    """Sends a purge request to a generic CDN webhook."""

    name = "Generic"

    def __init__(self, webhook_url: str, api_key: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.webhook_url = webhook_url
        self.api_key = api_key

    async def invalidate_urls(self, urls: list[str]) -> InvalidationResult:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        body = {
            "action": "purge_cache",
            "urls": urls,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        try:
            async with self._get_session().post(
                self.webhook_url, json=body, headers=headers
            ) as response:
                if response.status >= 400:
                    return InvalidationResult(
                        self.name,
                        False,
                        f"Generic CDN webhook failed with status {response.status}",
                    )
                try:
                    result = await response.json(content_type=None) or {}
                except ValueError:
                    result = {}
        except Exception as e:
            return InvalidationResult(
                self.name, False, f"Generic CDN invalidation error: {str(e)}"
            )

        invalidation_id = (
            result.get("id") if isinstance(result, dict) else None
        ) or f"generic-{int(time.time() * 1000)}"
        return InvalidationResult(
            self.name,
            True,
            f"Successfully sent invalidation request to {self.webhook_url}",
            invalidation_id,
        )
