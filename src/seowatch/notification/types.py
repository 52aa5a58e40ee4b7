"""Type definitions for the notification module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Protocol


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class DeliveryStatus(str, Enum):
    """Outcome of delivering an alert on one channel."""

    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class DeliveryResult:
    """Tagged result of one channel delivery attempt."""

    channel: str
    status: DeliveryStatus
    reason: Optional[str] = None
    attempted_at: datetime = field(default_factory=datetime.now)

    @property
    def delivered(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel,
            "status": self.status.value,
            "reason": self.reason,
            "attempted_at": self.attempted_at.isoformat(),
        }


class AlertLike(Protocol):
    """Fields of an alert that notification channels render."""

    id: str
    type: Any
    severity: Any
    message: str
    details: dict[str, Any]
    timestamp: datetime


class NotificationChannel(Protocol):
    """A delivery channel for alerts."""

    name: str

    async def deliver(self, alert: AlertLike, config: Any) -> DeliveryResult:
        ...
