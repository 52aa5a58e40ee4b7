"""Per-page SEO crawl scheduling."""

from .frequency import compute_next_run
from .manager import SEOScheduler
from .types import (
    CrawlOutcome,
    FailureSummary,
    Frequency,
    MonitoringMetrics,
    RunAlreadyInProgressError,
    RunStatus,
    ScheduleEntry,
    ScheduleNotFoundError,
    SchedulerError,
)

__all__ = [
    "SEOScheduler",
    "compute_next_run",
    "ScheduleEntry",
    "CrawlOutcome",
    "FailureSummary",
    "MonitoringMetrics",
    "Frequency",
    "RunStatus",
    "SchedulerError",
    "ScheduleNotFoundError",
    "RunAlreadyInProgressError",
]
