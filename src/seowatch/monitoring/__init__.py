"""Alerting on crawl scheduler metrics."""

from .system import MonitoringSystem
from .types import (
    Alert,
    AlertSeverity,
    AlertType,
    DashboardSnapshot,
    MonitoringError,
    SystemHealth,
)

__all__ = [
    "MonitoringSystem",
    "Alert",
    "AlertType",
    "AlertSeverity",
    "SystemHealth",
    "DashboardSnapshot",
    "MonitoringError",
]
