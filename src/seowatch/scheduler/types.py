"""Type definitions for the scheduler module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class SchedulerError(Exception):
    """Base exception for scheduler-related errors."""

    pass


class ScheduleNotFoundError(SchedulerError):
    """Raised when no schedule exists for a page."""

    def __init__(self, page_id: str):
        super().__init__(f"Schedule not found for page {page_id}")
        self.page_id = page_id


class RunAlreadyInProgressError(SchedulerError):
    """Raised when a manual run is requested for a page that is already running."""

    def __init__(self, page_id: str):
        super().__init__(f"Task already running for page {page_id}")
        self.page_id = page_id


class Frequency(str, Enum):
    """How often a page is crawled."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RunStatus(str, Enum):
    """Status of the last run of a schedule entry."""

    SUCCESS = "success"
    ERROR = "error"
    RUNNING = "running"


@dataclass
class ScheduleEntry:
    """Per-page crawl schedule."""

    page_id: str
    frequency: Frequency
    next_run: datetime
    crawl_enabled: bool = True
    reporting_enabled: bool = True
    last_run: Optional[datetime] = None
    last_status: Optional[RunStatus] = None
    last_error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.last_status == RunStatus.RUNNING

    def is_due(self, now: datetime) -> bool:
        return self.next_run <= now and not self.is_running

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_id": self.page_id,
            "frequency": self.frequency.value,
            "next_run": self.next_run.isoformat(),
            "crawl_enabled": self.crawl_enabled,
            "reporting_enabled": self.reporting_enabled,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_status": self.last_status.value if self.last_status else None,
            "last_error": self.last_error,
        }


# Fields that update_schedule() is allowed to change. Run bookkeeping
# (last_run, last_status, last_error) is owned by the scheduler.
MUTABLE_SCHEDULE_FIELDS = frozenset(
    {
        "frequency",
        "next_run",
        "crawl_enabled",
        "reporting_enabled",
    }
)


@dataclass(frozen=True)
class CrawlOutcome:
    """Result of one completed run. Never mutated after creation."""

    page_id: str
    success: bool
    duration_ms: int
    timestamp: datetime
    seo_score: Optional[float] = None
    errors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_id": self.page_id,
            "success": self.success,
            "duration_ms": self.duration_ms,
            "seo_score": self.seo_score,
            "errors": list(self.errors),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class FailureSummary:
    """Short description of a failed run."""

    page_id: str
    error: str
    timestamp: datetime


@dataclass
class MonitoringMetrics:
    """Aggregates over the last 24 hours of run history."""

    total_runs_24h: int = 0
    successful_runs_24h: int = 0
    failed_runs_24h: int = 0
    success_rate: float = 100.0
    average_response_time: float = 0.0  # milliseconds
    last_errors: list[FailureSummary] = field(default_factory=list)

    @property
    def failure_rate(self) -> float:
        if self.total_runs_24h == 0:
            return 0.0
        return self.failed_runs_24h / self.total_runs_24h * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_runs_24h": self.total_runs_24h,
            "successful_runs_24h": self.successful_runs_24h,
            "failed_runs_24h": self.failed_runs_24h,
            "success_rate": self.success_rate,
            "average_response_time": self.average_response_time,
            "last_errors": [
                {
                    "page_id": f.page_id,
                    "error": f.error,
                    "timestamp": f.timestamp.isoformat(),
                }
                for f in self.last_errors
            ],
        }
