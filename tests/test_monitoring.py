"""Tests for threshold checks, alert de-duplication and the dashboard."""

from unittest.mock import Mock

import pytest

from seowatch.config import AlertConfig
from seowatch.monitoring import (
    AlertSeverity,
    AlertType,
    MonitoringError,
    MonitoringSystem,
    SystemHealth,
)
from seowatch.scheduler import FailureSummary, MonitoringMetrics


def metrics_with(total=0, failed=0, average_response_time=0.0, errors=None):
    successful = total - failed
    return MonitoringMetrics(
        total_runs_24h=total,
        successful_runs_24h=successful,
        failed_runs_24h=failed,
        success_rate=successful / total * 100 if total else 100.0,
        average_response_time=average_response_time,
        last_errors=errors or [],
    )


@pytest.fixture
def metrics_source():
    return Mock(return_value=metrics_with())


@pytest.fixture
def monitoring(metrics_source, mock_dispatcher, clock):
    return MonitoringSystem(
        metrics_source=metrics_source,
        config=AlertConfig(),
        dispatcher=mock_dispatcher,
        clock=clock,
    )


class TestCheckConditions:
    @pytest.mark.asyncio
    async def test_no_runs_no_alerts(self, monitoring):
        assert await monitoring.check_conditions() == []
        assert monitoring.alert_count == 0

    @pytest.mark.asyncio
    async def test_high_failure_rate_is_critical(
        self, monitoring, metrics_source, clock
    ):
        failures = [
            FailureSummary(
                page_id=f"p{i}", error="Crawl failed: timeout", timestamp=clock()
            )
            for i in range(3)
        ]
        metrics_source.return_value = metrics_with(total=10, failed=3, errors=failures)

        alerts = await monitoring.check_conditions()

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AlertType.CRAWL_FAILURE
        assert alert.severity == AlertSeverity.CRITICAL
        assert alert.message == "High crawl failure rate: 30.0% (3/10)"
        assert alert.details["failed"] == 3
        assert len(alert.details["recent_errors"]) == 3
        assert monitoring.get_alerts() == [alert]

    @pytest.mark.parametrize(
        "failed, expected",
        [
            (5, AlertSeverity.MEDIUM),
            (12, AlertSeverity.HIGH),
            (20, AlertSeverity.CRITICAL),
        ],
    )
    @pytest.mark.asyncio
    async def test_failure_severity_breakpoints(
        self, monitoring, metrics_source, failed, expected
    ):
        metrics_source.return_value = metrics_with(total=100, failed=failed)

        alerts = await monitoring.check_conditions()

        assert [a.severity for a in alerts] == [expected]

    @pytest.mark.asyncio
    async def test_failure_rate_below_threshold(self, monitoring, metrics_source):
        metrics_source.return_value = metrics_with(total=100, failed=4)

        assert await monitoring.check_conditions() == []

    @pytest.mark.parametrize(
        "average, expected",
        [(500.0, AlertSeverity.MEDIUM), (1500.0, AlertSeverity.HIGH)],
    )
    @pytest.mark.asyncio
    async def test_slow_responses(self, monitoring, metrics_source, average, expected):
        metrics_source.return_value = metrics_with(
            total=10, average_response_time=average
        )

        alerts = await monitoring.check_conditions()

        assert len(alerts) == 1
        assert alerts[0].type == AlertType.RESPONSE_TIME
        assert alerts[0].severity == expected
        assert alerts[0].message == f"Slow response times: {round(average)}ms average"

    @pytest.mark.asyncio
    async def test_both_conditions(self, monitoring, metrics_source):
        metrics_source.return_value = metrics_with(
            total=10, failed=5, average_response_time=800.0
        )

        alerts = await monitoring.check_conditions()

        assert {a.type for a in alerts} == {
            AlertType.CRAWL_FAILURE,
            AlertType.RESPONSE_TIME,
        }

    @pytest.mark.asyncio
    async def test_metrics_error_is_swallowed(self, monitoring, metrics_source):
        metrics_source.side_effect = RuntimeError("scheduler unavailable")

        assert await monitoring.check_conditions() == []


class TestDeduplication:
    @pytest.mark.asyncio
    async def test_second_alert_is_suppressed(
        self, monitoring, metrics_source, mock_dispatcher
    ):
        metrics_source.return_value = metrics_with(total=10, failed=3)

        first = await monitoring.check_conditions()
        second = await monitoring.check_conditions()

        assert len(first) == 1
        assert second == []
        assert monitoring.alert_count == 1
        assert mock_dispatcher.dispatch.await_count == 1

    @pytest.mark.asyncio
    async def test_acknowledging_allows_a_new_alert(self, monitoring, metrics_source):
        metrics_source.return_value = metrics_with(total=10, failed=3)

        [first] = await monitoring.check_conditions()
        monitoring.acknowledge(first.id)
        second = await monitoring.check_conditions()

        assert len(second) == 1
        assert second[0].id != first.id
        assert len(monitoring.get_unacknowledged()) == 1

    @pytest.mark.asyncio
    async def test_window_expiry_allows_a_new_alert(
        self, monitoring, metrics_source, clock
    ):
        metrics_source.return_value = metrics_with(total=10, failed=3)

        await monitoring.check_conditions()
        clock.advance(minutes=59)
        assert await monitoring.check_conditions() == []

        clock.advance(minutes=2)
        assert len(await monitoring.check_conditions()) == 1
        assert monitoring.alert_count == 2

    @pytest.mark.asyncio
    async def test_different_types_are_independent(self, monitoring):
        first = await monitoring.create_alert(
            AlertType.CRAWL_FAILURE, AlertSeverity.HIGH, "failures"
        )
        second = await monitoring.create_alert(
            AlertType.RESPONSE_TIME, AlertSeverity.MEDIUM, "slow"
        )

        assert first is not None
        assert second is not None


class TestAlertHistory:
    @pytest.mark.asyncio
    async def test_history_is_bounded_newest_first(
        self, metrics_source, mock_dispatcher, clock
    ):
        monitoring = MonitoringSystem(
            metrics_source,
            config=AlertConfig(max_alerts_history=2),
            dispatcher=mock_dispatcher,
            clock=clock,
        )

        for i in range(5):
            await monitoring.create_alert(
                AlertType.EXTERNAL_SERVICE_ERROR, AlertSeverity.HIGH, f"error {i}"
            )
            monitoring.acknowledge_all()

        assert monitoring.alert_count == 2
        assert [a.message for a in monitoring.get_alerts()] == ["error 4", "error 3"]

    @pytest.mark.asyncio
    async def test_alert_fields(self, monitoring, clock):
        alert = await monitoring.create_alert(
            "response_time", "medium", "slow", {"average_response_time": 300}
        )

        assert alert.id.startswith("alert-")
        assert alert.timestamp == clock()
        assert alert.acknowledged is False
        assert alert.to_dict()["type"] == "response_time"
        assert alert.to_dict()["details"] == {"average_response_time": 300}

    @pytest.mark.asyncio
    async def test_acknowledge(self, monitoring):
        alert = await monitoring.create_alert(
            AlertType.CRAWL_FAILURE, AlertSeverity.HIGH, "failures"
        )

        assert monitoring.acknowledge("alert-unknown") is False
        assert monitoring.acknowledge(alert.id) is True
        assert monitoring.acknowledge(alert.id) is True
        assert alert.acknowledged is True

    @pytest.mark.asyncio
    async def test_acknowledge_all_counts_transitions(self, monitoring):
        first = await monitoring.create_alert(
            AlertType.CRAWL_FAILURE, AlertSeverity.HIGH, "failures"
        )
        await monitoring.create_alert(
            AlertType.RESPONSE_TIME, AlertSeverity.MEDIUM, "slow"
        )
        monitoring.acknowledge(first.id)

        assert monitoring.acknowledge_all() == 1
        assert monitoring.acknowledge_all() == 0
        assert monitoring.get_unacknowledged() == []

    @pytest.mark.asyncio
    async def test_get_alerts_filters(self, monitoring):
        await monitoring.create_alert(
            AlertType.CRAWL_FAILURE, AlertSeverity.CRITICAL, "failures"
        )
        await monitoring.create_alert(
            AlertType.RESPONSE_TIME, AlertSeverity.MEDIUM, "slow"
        )

        assert [a.message for a in monitoring.get_alerts(alert_type="response_time")] == [
            "slow"
        ]
        assert [
            a.message for a in monitoring.get_alerts(severity=AlertSeverity.CRITICAL)
        ] == ["failures"]
        assert len(monitoring.get_alerts(limit=1)) == 1

    @pytest.mark.asyncio
    async def test_external_service_error(self, monitoring):
        alert = await monitoring.record_external_service_error(
            "cdn", "purge failed", {"provider": "Cloudflare"}
        )

        assert alert.type == AlertType.EXTERNAL_SERVICE_ERROR
        assert alert.severity == AlertSeverity.HIGH
        assert alert.message == "cdn error: purge failed"
        assert alert.details == {"provider": "Cloudflare", "source": "cdn"}

    @pytest.mark.asyncio
    async def test_external_service_errors_are_deduplicated(self, monitoring):
        await monitoring.record_external_service_error("cdn", "first")

        assert await monitoring.record_external_service_error("cdn", "second") is None


class TestNotifications:
    @pytest.mark.asyncio
    async def test_alert_is_dispatched_with_current_config(
        self, monitoring, mock_dispatcher
    ):
        monitoring.update_config(
            slack_notifications=True, slack_webhook_url="https://hooks.example/x"
        )

        alert = await monitoring.create_alert(
            AlertType.CRAWL_FAILURE, AlertSeverity.HIGH, "failures"
        )

        sent_alert, sent_config = mock_dispatcher.dispatch.await_args.args
        assert sent_alert is alert
        assert sent_config.slack_notifications is True
        assert sent_config.slack_webhook_url == "https://hooks.example/x"

    @pytest.mark.asyncio
    async def test_dispatch_failure_keeps_the_alert(self, monitoring, mock_dispatcher):
        mock_dispatcher.dispatch.side_effect = RuntimeError("smtp down")

        alert = await monitoring.create_alert(
            AlertType.CRAWL_FAILURE, AlertSeverity.HIGH, "failures"
        )

        assert alert is not None
        assert monitoring.alert_count == 1
        assert await monitoring.send_notifications(alert) == []


class TestDashboard:
    def test_healthy(self, monitoring):
        snapshot = monitoring.get_dashboard_snapshot()

        assert snapshot.system_health == SystemHealth.HEALTHY
        assert snapshot.unacknowledged_count == 0
        assert snapshot.recent_alerts == []
        assert snapshot.to_dict()["system_health"] == "healthy"

    @pytest.mark.parametrize(
        "metrics, expected",
        [
            (metrics_with(total=100, failed=10), SystemHealth.WARNING),
            (metrics_with(total=100, failed=30), SystemHealth.CRITICAL),
            (
                metrics_with(total=100, average_response_time=1200.0),
                SystemHealth.WARNING,
            ),
            (metrics_with(total=100, failed=4), SystemHealth.HEALTHY),
        ],
    )
    def test_health_from_metrics(self, monitoring, metrics_source, metrics, expected):
        metrics_source.return_value = metrics

        assert monitoring.get_dashboard_snapshot().system_health == expected

    @pytest.mark.asyncio
    async def test_unacknowledged_critical_alert_is_critical(self, monitoring):
        alert = await monitoring.create_alert(
            AlertType.CRAWL_FAILURE, AlertSeverity.CRITICAL, "failures"
        )

        snapshot = monitoring.get_dashboard_snapshot()
        assert snapshot.system_health == SystemHealth.CRITICAL
        assert snapshot.unacknowledged_count == 1

        monitoring.acknowledge(alert.id)
        assert monitoring.get_dashboard_snapshot().system_health == SystemHealth.HEALTHY

    @pytest.mark.asyncio
    async def test_recent_alerts_are_capped(self, monitoring):
        for i in range(12):
            await monitoring.create_alert(
                AlertType.EXTERNAL_SERVICE_ERROR, AlertSeverity.LOW, f"error {i}"
            )
            monitoring.acknowledge_all()

        snapshot = monitoring.get_dashboard_snapshot()
        assert len(snapshot.recent_alerts) == 10
        assert snapshot.recent_alerts[0].message == "error 11"


class TestConfig:
    def test_update_merges_fields(self, monitoring):
        config = monitoring.update_config(crawl_failure_threshold=8.0)

        assert config.crawl_failure_threshold == 8.0
        assert config.response_time_threshold == 200.0

    @pytest.mark.asyncio
    async def test_updated_threshold_applies(self, monitoring, metrics_source):
        metrics_source.return_value = metrics_with(total=100, failed=7)
        monitoring.update_config(crawl_failure_threshold=8.0)

        assert await monitoring.check_conditions() == []

    def test_unknown_field(self, monitoring):
        with pytest.raises(MonitoringError, match="Unknown alert config fields"):
            monitoring.update_config(pager_duty=True)

    def test_invalid_ordering_is_rejected(self, monitoring):
        with pytest.raises(MonitoringError):
            monitoring.update_config(failure_critical_threshold=1.0)

        assert monitoring.get_config().failure_critical_threshold == 20.0

    def test_recipients_accept_comma_separated_string(self, monitoring):
        config = monitoring.update_config(email_recipients="a@x.com, b@x.com")

        assert config.email_recipients == ["a@x.com", "b@x.com"]

    def test_get_config_returns_a_copy(self, monitoring):
        config = monitoring.get_config()
        config.email_recipients.append("ops@example.com")

        assert monitoring.get_config().email_recipients == []
