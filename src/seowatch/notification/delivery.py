"""Best-effort fan-out of alerts to notification channels."""

import asyncio
from typing import Optional

from ..config.settings import AlertConfig, SmtpSettings
from ..utils.logging import get_structured_logger
from .formatting import AlertMessageFormatter
from .slack import SlackWebhookChannel
from .smtp import EmailChannel, EmailSender
from .types import AlertLike, DeliveryResult, DeliveryStatus, NotificationChannel

logger = get_structured_logger(__name__)


class NotificationDispatcher:
    """Delivers an alert on every channel independently.

    A failure on one channel never prevents the others from being
    attempted, and ``dispatch`` never raises.
    """

    def __init__(self, channels: Optional[list[NotificationChannel]] = None):
        self.channels: list[NotificationChannel] = list(channels or [])
        self.delivery_stats = {
            DeliveryStatus.DELIVERED.value: 0,
            DeliveryStatus.FAILED.value: 0,
            DeliveryStatus.SKIPPED.value: 0,
        }

    @classmethod
    def from_settings(cls, smtp: SmtpSettings) -> "NotificationDispatcher":
        formatter = AlertMessageFormatter()
        return cls(
            [
                EmailChannel(EmailSender(smtp), formatter),
                SlackWebhookChannel(formatter),
            ]
        )

    async def _deliver_one(
        self, channel: NotificationChannel, alert: AlertLike, config: AlertConfig
    ) -> DeliveryResult:
        try:
            return await channel.deliver(alert, config)
        except Exception as e:
            logger.error(
                f"Notification channel raised: {str(e)}",
                channel=channel.name,
                alert_id=alert.id,
            )
            return DeliveryResult(channel.name, DeliveryStatus.FAILED, str(e))

    async def dispatch(
        self, alert: AlertLike, config: AlertConfig
    ) -> list[DeliveryResult]:
        if not self.channels:
            return []

        results = await asyncio.gather(
            *(self._deliver_one(channel, alert, config) for channel in self.channels)
        )

        for result in results:
            self.delivery_stats[result.status.value] += 1

        logger.debug(
            "Alert dispatch complete",
            alert_id=alert.id,
            results={r.channel: r.status.value for r in results},
        )
        return list(results)
