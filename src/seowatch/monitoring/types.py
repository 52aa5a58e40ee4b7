"""Type definitions for the monitoring and alerting module."""

import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..scheduler.types import MonitoringMetrics


class MonitoringError(Exception):
    """Base exception for monitoring-related errors."""

    pass


class AlertType(str, Enum):
    """Conditions that raise an alert."""

    CRAWL_FAILURE = "crawl_failure"
    RESPONSE_TIME = "response_time"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AlertSeverity(str, Enum):
    """Alert severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SystemHealth(str, Enum):
    """Derived health summary shown on the dashboard."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_alert_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"alert-{int(time.time() * 1000)}-{suffix}"


@dataclass
class Alert:
    """An anomalous condition. Acknowledgement is its only mutation."""

    type: AlertType
    severity: AlertSeverity
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=generate_alert_id)
    timestamp: datetime = field(default_factory=datetime.now)
    acknowledged: bool = False

    def acknowledge(self) -> None:
        self.acknowledged = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "acknowledged": self.acknowledged,
        }


@dataclass
class DashboardSnapshot:
    """Point-in-time view of metrics and alerts."""

    metrics: MonitoringMetrics
    recent_alerts: list[Alert]
    unacknowledged_count: int
    system_health: SystemHealth
    generated_at: datetime = field(default_factory=datetime.now)
    delivery_stats: Optional[dict[str, int]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": self.metrics.to_dict(),
            "recent_alerts": [a.to_dict() for a in self.recent_alerts],
            "unacknowledged_count": self.unacknowledged_count,
            "system_health": self.system_health.value,
            "generated_at": self.generated_at.isoformat(),
            "delivery_stats": self.delivery_stats,
        }
