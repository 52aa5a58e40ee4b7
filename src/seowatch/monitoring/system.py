"""Threshold checks, alert history and notification dispatch."""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..config.settings import AlertConfig
from ..notification.delivery import NotificationDispatcher
from ..notification.types import DeliveryResult
from ..scheduler.types import MonitoringMetrics
from ..utils.logging import get_structured_logger
from .types import (
    Alert,
    AlertSeverity,
    AlertType,
    DashboardSnapshot,
    MonitoringError,
    SystemHealth,
)

logger = get_structured_logger(__name__)

DASHBOARD_RECENT_ALERTS = 10
RECENT_ERRORS_IN_DETAILS = 5
HEALTH_CRITICAL_SUCCESS_RATE = 80.0
HEALTH_WARNING_SUCCESS_RATE = 95.0
HEALTH_WARNING_RESPONSE_TIME = 1000.0


class MonitoringSystem:
    """Watches scheduler metrics and raises de-duplicated alerts.

    Alerts are kept newest first in a bounded in-memory list. While an
    unacknowledged alert of a given type is younger than the de-dup window,
    further alerts of that type are dropped without being stored or sent.
    """

    def __init__(
        self,
        metrics_source: Callable[[], MonitoringMetrics],
        config: Optional[AlertConfig] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.metrics_source = metrics_source
        self._config = config or AlertConfig()
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.clock = clock
        self._alerts: list[Alert] = []

    async def check_conditions(self) -> list[Alert]:
        """Compare current metrics against thresholds. Returns created alerts."""
        created: list[Alert] = []

        try:
            metrics = self.metrics_source()
        except Exception as e:
            logger.error(f"Error reading metrics for alert checks: {str(e)}")
            return created

        config = self._config

        if metrics.total_runs_24h > 0:
            failure_rate = metrics.failure_rate
            if failure_rate >= config.crawl_failure_threshold:
                alert = await self.create_alert(
                    AlertType.CRAWL_FAILURE,
                    self._failure_severity(failure_rate),
                    f"High crawl failure rate: {failure_rate:.1f}% "
                    f"({metrics.failed_runs_24h}/{metrics.total_runs_24h})",
                    {
                        "failure_rate": failure_rate,
                        "failed": metrics.failed_runs_24h,
                        "total": metrics.total_runs_24h,
                        "recent_errors": [
                            {
                                "page_id": f.page_id,
                                "error": f.error,
                                "timestamp": f.timestamp.isoformat(),
                            }
                            for f in metrics.last_errors[:RECENT_ERRORS_IN_DETAILS]
                        ],
                    },
                )
                if alert:
                    created.append(alert)

        if metrics.average_response_time > config.response_time_threshold:
            severity = (
                AlertSeverity.HIGH
                if metrics.average_response_time > config.response_time_high_threshold
                else AlertSeverity.MEDIUM
            )
            alert = await self.create_alert(
                AlertType.RESPONSE_TIME,
                severity,
                f"Slow response times: {round(metrics.average_response_time)}ms average",
                {
                    "average_response_time": metrics.average_response_time,
                    "threshold": config.response_time_threshold,
                },
            )
            if alert:
                created.append(alert)

        return created

    def _failure_severity(self, failure_rate: float) -> AlertSeverity:
        if failure_rate >= self._config.failure_critical_threshold:
            return AlertSeverity.CRITICAL
        if failure_rate >= self._config.failure_high_threshold:
            return AlertSeverity.HIGH
        return AlertSeverity.MEDIUM

    def _is_duplicate(self, alert_type: AlertType, now: datetime) -> bool:
        window_start = now - timedelta(seconds=self._config.dedup_window_seconds)
        return any(
            a.type == alert_type and not a.acknowledged and a.timestamp > window_start
            for a in self._alerts
        )

    async def create_alert(
        self,
        alert_type: Union[AlertType, str],
        severity: Union[AlertSeverity, str],
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> Optional[Alert]:
        """Store and dispatch an alert unless an equivalent one is still open.

        Returns the stored alert, or None when it was suppressed.
        """
        alert_type = AlertType(alert_type)
        now = self.clock()

        if self._is_duplicate(alert_type, now):
            logger.info("Suppressing duplicate alert", alert_type=alert_type.value)
            return None

        alert = Alert(
            type=alert_type,
            severity=AlertSeverity(severity),
            message=message,
            details=dict(details or {}),
            timestamp=now,
        )

        self._alerts.insert(0, alert)
        del self._alerts[self._config.max_alerts_history :]

        logger.warning(
            "Alert created",
            alert_id=alert.id,
            alert_type=alert.type.value,
            severity=alert.severity.value,
            message=message,
        )

        await self.send_notifications(alert)
        return alert

    async def send_notifications(self, alert: Alert) -> list[DeliveryResult]:
        """Deliver an alert on every channel. Never raises."""
        try:
            return await self.dispatcher.dispatch(alert, self._config)
        except Exception as e:
            logger.error(
                f"Notification dispatch failed: {str(e)}", alert_id=alert.id
            )
            return []

    async def record_external_service_error(
        self,
        source: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
        severity: Union[AlertSeverity, str] = AlertSeverity.HIGH,
    ) -> Optional[Alert]:
        """Raise an alert on behalf of a collaborator such as the CDN."""
        payload = dict(details or {})
        payload["source"] = source
        return await self.create_alert(
            AlertType.EXTERNAL_SERVICE_ERROR,
            severity,
            f"{source} error: {message}",
            payload,
        )

    def acknowledge(self, alert_id: str) -> bool:
        for alert in self._alerts:
            if alert.id == alert_id:
                alert.acknowledge()
                logger.info("Alert acknowledged", alert_id=alert_id)
                return True
        return False

    def acknowledge_all(self) -> int:
        pending = [a for a in self._alerts if not a.acknowledged]
        for alert in pending:
            alert.acknowledge()
        logger.info("Alerts acknowledged", count=len(pending))
        return len(pending)

    def get_alerts(
        self,
        limit: int = 50,
        alert_type: Optional[Union[AlertType, str]] = None,
        severity: Optional[Union[AlertSeverity, str]] = None,
    ) -> list[Alert]:
        alerts = self._alerts
        if alert_type is not None:
            alerts = [a for a in alerts if a.type == AlertType(alert_type)]
        if severity is not None:
            alerts = [a for a in alerts if a.severity == AlertSeverity(severity)]
        return list(alerts[:limit])

    def get_unacknowledged(self) -> list[Alert]:
        return [a for a in self._alerts if not a.acknowledged]

    def get_dashboard_snapshot(self) -> DashboardSnapshot:
        metrics = self.metrics_source()
        recent = self.get_alerts(DASHBOARD_RECENT_ALERTS)

        health = SystemHealth.HEALTHY
        if metrics.success_rate < HEALTH_CRITICAL_SUCCESS_RATE:
            health = SystemHealth.CRITICAL
        elif (
            metrics.success_rate < HEALTH_WARNING_SUCCESS_RATE
            or metrics.average_response_time > HEALTH_WARNING_RESPONSE_TIME
        ):
            health = SystemHealth.WARNING

        if any(
            a.severity == AlertSeverity.CRITICAL and not a.acknowledged for a in recent
        ):
            health = SystemHealth.CRITICAL

        return DashboardSnapshot(
            metrics=metrics,
            recent_alerts=recent,
            unacknowledged_count=len(self.get_unacknowledged()),
            system_health=health,
            generated_at=self.clock(),
            delivery_stats=dict(self.dispatcher.delivery_stats),
        )

    def update_config(self, **changes: Any) -> AlertConfig:
        """Merge changes into the alert configuration and re-validate it."""
        unknown = set(changes) - set(AlertConfig.model_fields)
        if unknown:
            raise MonitoringError(
                f"Unknown alert config fields: {', '.join(sorted(unknown))}"
            )

        merged = {**self._config.model_dump(), **changes}
        try:
            self._config = AlertConfig.model_validate(merged)
        except ValidationError as e:
            raise MonitoringError(f"Invalid alert configuration: {str(e)}") from e

        logger.info("Alert configuration updated", fields=sorted(changes))
        return self.get_config()

    def get_config(self) -> AlertConfig:
        return self._config.model_copy(deep=True)

    @property
    def alert_count(self) -> int:
        return len(self._alerts)
