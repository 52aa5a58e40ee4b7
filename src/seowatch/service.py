"""Composition root that wires the SEO monitoring components together."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .cdn.manager import CDNManager
from .config.settings import AppSettings
from .crawler.browser import SEOCrawler
from .monitoring.system import MonitoringSystem
from .notification.delivery import NotificationDispatcher
from .pages.catalog import YamlPageCatalog
from .reporting.search_console import SearchConsoleClient
from .scheduler.interfaces import (
    CrawlerProtocol,
    PageCatalogProtocol,
    ReportingProtocol,
)
from .scheduler.manager import SEOScheduler
from .scheduler.types import SchedulerError
from .utils.async_utils import AsyncContextManager
from .utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

TICK_JOB_ID = "seo_scheduler_tick"
CHECK_JOB_ID = "monitoring_check"


class MonitoringService(AsyncContextManager):
    """Builds the scheduler, monitoring and CDN components and drives their timers.

    Two interval jobs run on an AsyncIOScheduler: the crawl scheduler tick
    and the alert condition check. Neither job overlaps with itself.
    """

    def __init__(
        self,
        settings: AppSettings,
        catalog: Optional[PageCatalogProtocol] = None,
        crawler: Optional[CrawlerProtocol] = None,
        reporter: Optional[ReportingProtocol] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.is_running = False
        self.start_time: Optional[datetime] = None

        self.catalog = catalog or YamlPageCatalog(Path(settings.pages_file))
        self.crawler = crawler or SEOCrawler(settings.crawler)
        self.reporter = reporter or SearchConsoleClient(settings.search_console)

        self.scheduler = SEOScheduler(
            catalog=self.catalog,
            crawler=self.crawler,
            reporter=self.reporter,
            base_url=settings.scheduler.base_url,
            default_frequency=settings.scheduler.default_frequency,
            history_limit=settings.scheduler.history_limit,
            clock=clock,
        )
        self.monitoring = MonitoringSystem(
            metrics_source=self.scheduler.get_metrics,
            config=settings.alerts.model_copy(deep=True),
            dispatcher=dispatcher or NotificationDispatcher.from_settings(settings.smtp),
            clock=clock,
        )
        self.cdn = CDNManager.from_settings(
            settings.cdn,
            error_reporter=self.monitoring,
            base_url=settings.scheduler.base_url,
        )

        self._timer: Optional[AsyncIOScheduler] = None

    async def setup(self) -> None:
        await self.start()

    async def cleanup(self) -> None:
        await self.stop()

    async def start(self) -> None:
        """Load schedules and start both interval jobs."""
        if self.is_running:
            return

        logger.info("Starting SEO monitoring service")

        try:
            await self.scheduler.load_schedules()

            self._timer = AsyncIOScheduler(
                job_defaults={"coalesce": True, "max_instances": 1}
            )
            self._timer.add_job(
                self.run_tick,
                "interval",
                seconds=self.settings.scheduler.tick_interval_seconds,
                id=TICK_JOB_ID,
                replace_existing=True,
            )
            self._timer.add_job(
                self.run_check,
                "interval",
                seconds=self.settings.alerts.check_interval_seconds,
                id=CHECK_JOB_ID,
                replace_existing=True,
            )
            self._timer.start()

            self.is_running = True
            self.start_time = datetime.now()
            logger.info(
                "SEO monitoring service started",
                schedules=len(self.scheduler.get_schedules()),
                tick_interval=self.settings.scheduler.tick_interval_seconds,
                check_interval=self.settings.alerts.check_interval_seconds,
            )

        except Exception as e:
            logger.error(f"Failed to start monitoring service: {str(e)}")
            raise SchedulerError(f"Service startup failed: {str(e)}") from e

    async def stop(self) -> None:
        """Stop the timers without waiting for in-flight runs, then release clients."""
        if not self.is_running:
            return

        logger.info("Stopping SEO monitoring service")

        if self._timer is not None:
            self._timer.shutdown(wait=False)
            self._timer = None
        self.is_running = False

        for name, component in (
            ("crawler", self.crawler),
            ("reporter", self.reporter),
            ("cdn", self.cdn),
        ):
            closer = getattr(component, "cleanup", None) or getattr(
                component, "close", None
            )
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning(f"Error closing {name}: {str(e)}")

        logger.info("SEO monitoring service stopped")

    async def run_tick(self) -> None:
        try:
            await self.scheduler.tick()
        except Exception as e:
            logger.error(f"Scheduler tick failed: {str(e)}")

    async def run_check(self) -> None:
        try:
            await self.monitoring.check_conditions()
        except Exception as e:
            logger.error(f"Alert check failed: {str(e)}")

    def get_status(self) -> dict:
        uptime = (
            (datetime.now() - self.start_time).total_seconds()
            if self.start_time and self.is_running
            else 0
        )
        jobs = []
        if self._timer is not None:
            for job in self._timer.get_jobs():
                jobs.append(
                    {
                        "id": job.id,
                        "next_run_time": (
                            job.next_run_time.isoformat() if job.next_run_time else None
                        ),
                    }
                )
        return {
            "running": self.is_running,
            "uptime_seconds": uptime,
            "schedules": len(self.scheduler.get_schedules()),
            "history_size": self.scheduler.history_size,
            "alerts": self.monitoring.alert_count,
            "cdn_providers": self.cdn.get_configured_providers(),
            "search_console_configured": bool(
                getattr(self.reporter, "is_configured", lambda: False)()
            ),
            "jobs": jobs,
        }
