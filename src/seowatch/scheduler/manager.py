"""Per-page SEO crawl scheduler with in-memory run history."""

import time
from collections import deque
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from ..pages.types import PageConfig
from ..utils.logging import get_structured_logger
from .frequency import compute_next_run
from .interfaces import CrawlerProtocol, PageCatalogProtocol, ReportingProtocol
from .types import (
    MUTABLE_SCHEDULE_FIELDS,
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

logger = get_structured_logger(__name__)

METRICS_WINDOW = timedelta(hours=24)
RECENT_FAILURES_LIMIT = 10


class SEOScheduler:
    """Owns the schedule table and decides which pages are due for a run.

    The scheduler does not own a timer. ``tick()`` is driven by whatever
    composition root starts it, and every due entry is processed one after
    the other within a tick.
    """

    def __init__(
        self,
        catalog: PageCatalogProtocol,
        crawler: Optional[CrawlerProtocol] = None,
        reporter: Optional[ReportingProtocol] = None,
        base_url: str = "https://memopyk.com",
        default_frequency: Union[Frequency, str] = Frequency.DAILY,
        history_limit: int = 1000,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if history_limit <= 0:
            raise SchedulerError("history_limit must be positive")

        self.catalog = catalog
        self.crawler = crawler
        self.reporter = reporter
        self.base_url = base_url.rstrip("/")
        self.default_frequency = Frequency(default_frequency)
        self.history_limit = history_limit
        self.clock = clock

        self._schedules: dict[str, ScheduleEntry] = {}
        self._history: deque[CrawlOutcome] = deque(maxlen=history_limit)

    async def load_schedules(self) -> int:
        """Create entries for catalog pages that have no schedule yet.

        Existing entries are left untouched. Returns the number of entries
        created.
        """
        pages = await self.catalog.list_pages()
        now = self.clock()
        created = 0

        for page in pages:
            if page.id in self._schedules:
                continue
            self._schedules[page.id] = ScheduleEntry(
                page_id=page.id,
                frequency=self.default_frequency,
                next_run=compute_next_run(self.default_frequency, now),
            )
            created += 1

        logger.info(
            "Schedules loaded",
            created=created,
            total=len(self._schedules),
        )
        return created

    def add_schedule(self, entry: ScheduleEntry) -> None:
        """Register an entry directly; replaces any entry for the same page."""
        self._schedules[entry.page_id] = entry

    async def tick(self) -> int:
        """Run every due entry. Returns the number of runs performed."""
        now = self.clock()

        processed = 0
        for entry in list(self._schedules.values()):
            try:
                # An earlier run in this tick may have changed the entry.
                if not entry.is_due(now):
                    continue
                await self.run_one(entry)
                processed += 1
            except Exception as e:
                logger.error(
                    f"Unexpected error running schedule: {str(e)}",
                    page_id=entry.page_id,
                )

        if processed:
            logger.debug("Processed due schedules", count=processed)
        return processed

    async def run_one(self, entry: ScheduleEntry) -> CrawlOutcome:
        """Crawl and report one page, then record the outcome."""
        started = time.perf_counter()
        entry.last_status = RunStatus.RUNNING
        entry.last_run = self.clock()

        errors: list[str] = []
        seo_score: Optional[float] = None

        log = logger.bind(page_id=entry.page_id)
        log.info("Starting scheduled run")

        try:
            page = await self.catalog.get_page(entry.page_id)
        except Exception as e:
            page = None
            errors.append(f"Page lookup error: {str(e)}")
        else:
            if page is None:
                errors.append(f"Page configuration not found for {entry.page_id}")

        if page is not None:
            url = page.full_url(self.base_url)

            if entry.crawl_enabled and self.crawler is not None:
                seo_score = await self._crawl(url, errors)

            if entry.reporting_enabled and self.reporter is not None:
                await self._report(url, page, errors)

        entry.last_status = RunStatus.ERROR if errors else RunStatus.SUCCESS
        entry.last_error = "; ".join(errors) if errors else None
        entry.next_run = compute_next_run(entry.frequency, self.clock())

        outcome = CrawlOutcome(
            page_id=entry.page_id,
            success=not errors,
            duration_ms=int((time.perf_counter() - started) * 1000),
            timestamp=self.clock(),
            seo_score=seo_score,
            errors=tuple(errors),
        )
        self._history.appendleft(outcome)

        if errors:
            log.warning(
                "Scheduled run finished with errors",
                errors=list(errors),
                next_run=entry.next_run.isoformat(),
            )
        else:
            log.info(
                "Scheduled run completed",
                seo_score=seo_score,
                duration_ms=outcome.duration_ms,
                next_run=entry.next_run.isoformat(),
            )

        return outcome

    async def _crawl(self, url: str, errors: list[str]) -> Optional[float]:
        try:
            result = await self.crawler.crawl(url)
        except Exception as e:
            errors.append(f"Crawl error: {str(e)}")
            return None

        status = getattr(result.status, "value", result.status)
        if status != "success":
            errors.append(f"Crawl failed: {result.error_details or 'Unknown error'}")
            return None

        return result.seo_score

    async def _report(self, url: str, page: PageConfig, errors: list[str]) -> None:
        try:
            if not self.reporter.is_configured():
                return
            await self.reporter.generate_report(url, page.page_key, page.locale)
        except Exception as e:
            errors.append(f"Search Console error: {str(e)}")

    async def trigger_now(self, page_id: str) -> CrawlOutcome:
        """Run a page immediately, outside its regular cadence."""
        entry = self._schedules.get(page_id)
        if entry is None:
            raise ScheduleNotFoundError(page_id)
        if entry.is_running:
            raise RunAlreadyInProgressError(page_id)

        logger.info("Manual run triggered", page_id=page_id)
        return await self.run_one(entry)

    def update_schedule(self, page_id: str, /, **changes: Any) -> ScheduleEntry:
        """Merge ``changes`` into a schedule entry.

        A frequency change recomputes ``next_run`` from the current time,
        overriding any ``next_run`` passed in the same update.
        """
        entry = self._schedules.get(page_id)
        if entry is None:
            raise ScheduleNotFoundError(page_id)

        unknown = set(changes) - MUTABLE_SCHEDULE_FIELDS
        if unknown:
            raise SchedulerError(
                f"Unknown schedule fields: {', '.join(sorted(unknown))}"
            )

        if "frequency" in changes:
            try:
                changes["frequency"] = Frequency(changes["frequency"])
            except ValueError as e:
                raise SchedulerError(
                    f"Unknown frequency: {changes['frequency']}"
                ) from e
        if "next_run" in changes:
            next_run = changes["next_run"]
            if not isinstance(next_run, datetime) or next_run.tzinfo is not None:
                raise SchedulerError(
                    f"next_run must be a local time without UTC offset: {next_run}"
                )

        for name, value in changes.items():
            setattr(entry, name, value)

        if "frequency" in changes:
            entry.next_run = compute_next_run(entry.frequency, self.clock())

        logger.info(
            "Schedule updated",
            page_id=page_id,
            fields=sorted(changes),
            next_run=entry.next_run.isoformat(),
        )
        return entry

    def get_metrics(self) -> MonitoringMetrics:
        """Aggregate the last 24 hours of run history."""
        cutoff = self.clock() - METRICS_WINDOW
        recent = [o for o in self._history if o.timestamp >= cutoff]

        total = len(recent)
        successful = sum(1 for o in recent if o.success)
        failed = total - successful

        if total == 0:
            return MonitoringMetrics()

        failures = [
            FailureSummary(
                page_id=o.page_id, error="; ".join(o.errors), timestamp=o.timestamp
            )
            for o in recent
            if not o.success
        ][:RECENT_FAILURES_LIMIT]

        return MonitoringMetrics(
            total_runs_24h=total,
            successful_runs_24h=successful,
            failed_runs_24h=failed,
            success_rate=successful / total * 100,
            average_response_time=sum(o.duration_ms for o in recent) / total,
            last_errors=failures,
        )

    def get_schedules(self) -> list[ScheduleEntry]:
        """Return copies of all schedule entries."""
        return [replace(entry) for entry in self._schedules.values()]

    def get_schedule(self, page_id: str) -> Optional[ScheduleEntry]:
        entry = self._schedules.get(page_id)
        return replace(entry) if entry else None

    def get_outcomes(
        self, page_id: Optional[str] = None, limit: int = 50
    ) -> list[CrawlOutcome]:
        """Return the newest outcomes, optionally for a single page."""
        outcomes = (
            o for o in self._history if page_id is None or o.page_id == page_id
        )
        result = []
        for outcome in outcomes:
            if len(result) >= limit:
                break
            result.append(outcome)
        return result

    @property
    def history_size(self) -> int:
        return len(self._history)
