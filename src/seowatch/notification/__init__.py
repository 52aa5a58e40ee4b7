"""Alert notification channels."""

from .delivery import NotificationDispatcher
from .formatting import AlertMessageFormatter
from .slack import SlackWebhookChannel
from .smtp import EmailChannel, EmailSender
from .types import DeliveryResult, DeliveryStatus, NotificationError

__all__ = [
    "NotificationDispatcher",
    "AlertMessageFormatter",
    "EmailChannel",
    "EmailSender",
    "SlackWebhookChannel",
    "DeliveryResult",
    "DeliveryStatus",
    "NotificationError",
]
