"""Slack incoming-webhook alert channel."""

from collections.abc import Callable
from typing import Optional

from slack_sdk.webhook.async_client import AsyncWebhookClient

from ..config.settings import AlertConfig
from ..utils.logging import get_structured_logger
from .formatting import AlertMessageFormatter
from .types import AlertLike, DeliveryResult, DeliveryStatus

logger = get_structured_logger(__name__)


class SlackWebhookChannel:
    """Posts alerts to the configured Slack incoming webhook."""

    name = "slack"

    def __init__(
        self,
        formatter: Optional[AlertMessageFormatter] = None,
        client_factory: Callable[[str], AsyncWebhookClient] = AsyncWebhookClient,
    ):
        self.formatter = formatter or AlertMessageFormatter()
        self.client_factory = client_factory
        self._clients: dict[str, AsyncWebhookClient] = {}

    def _get_client(self, url: str) -> AsyncWebhookClient:
        if url not in self._clients:
            self._clients[url] = self.client_factory(url)
        return self._clients[url]

    async def deliver(self, alert: AlertLike, config: AlertConfig) -> DeliveryResult:
        if not config.slack_notifications:
            return DeliveryResult(self.name, DeliveryStatus.SKIPPED, "disabled")
        if not config.slack_webhook_url:
            return DeliveryResult(self.name, DeliveryStatus.SKIPPED, "no webhook url")

        payload = self.formatter.format_slack_payload(alert)

        try:
            response = await self._get_client(config.slack_webhook_url).send_dict(
                payload
            )
        except Exception as e:
            logger.error(f"Failed to post Slack alert: {str(e)}", alert_id=alert.id)
            return DeliveryResult(self.name, DeliveryStatus.FAILED, str(e))

        if response.status_code != 200:
            reason = f"HTTP {response.status_code}: {response.body}"
            logger.error(
                "Slack webhook rejected alert", alert_id=alert.id, reason=reason
            )
            return DeliveryResult(self.name, DeliveryStatus.FAILED, reason)

        logger.info("Slack alert sent", alert_id=alert.id)
        return DeliveryResult(self.name, DeliveryStatus.DELIVERED)
