"""
APScheduler wrapper for the reminder polling tick.
Runs one repeating job on the asyncio event loop.
"""

from datetime import datetime
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED

from config.logging_config import get_logger
from config import settings

logger = get_logger(__name__)


class ReminderScheduler:
    """
    Owns the single polling job of an alarm session.
    Re-arming replaces the job, so there is never more than one live timer.
    """

    def __init__(self, interval_seconds: float = None):
        """
        Initialize scheduler.

        Args:
            interval_seconds: Seconds between ticks (default from settings)
        """
        self.interval_seconds = interval_seconds or settings.POLL_INTERVAL_SECONDS
        self.tick: Optional[Callable[[], Awaitable]] = None
        self.scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def start(self, tick: Callable[[], Awaitable], run_now: bool = True) -> None:
        """
        Start polling. Must be called from within the running event loop.

        Args:
            tick: Coroutine function run on every tick
            run_now: Run the first tick immediately instead of after one interval
        """
        if self.running:
            logger.warning("Scheduler already running")
            return

        self.tick = tick
        self.scheduler = AsyncIOScheduler(
            job_defaults={
                'coalesce': True,  # Merge ticks that piled up
                'max_instances': 1,  # Never overlap ticks
                'misfire_grace_time': int(self.interval_seconds)
            }
        )
        self.scheduler.add_listener(self._job_executed, EVENT_JOB_EXECUTED)
        self.scheduler.add_listener(self._job_error, EVENT_JOB_ERROR)
        self.scheduler.add_listener(self._job_missed, EVENT_JOB_MISSED)
        self.scheduler.start()

        self._add_poll_job(run_now)
        logger.info(f"Polling started every {self.interval_seconds:g}s")

    def rearm(self) -> None:
        """
        Replace the polling job with a fresh one.
        The next tick runs one full interval from now.
        """
        if not self.running:
            logger.debug("Scheduler not running, nothing to re-arm")
            return

        self._add_poll_job(run_now=False)
        logger.debug("Polling timer re-armed")

    def shutdown(self) -> None:
        """Stop polling and discard the job."""
        if self.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Polling stopped")
        self.scheduler = None

    def get_next_run_time(self) -> Optional[datetime]:
        """
        Get the next tick time.

        Returns:
            Next run time or None if not polling
        """
        if not self.running:
            return None

        job = self.scheduler.get_job(settings.POLL_JOB_ID)
        return job.next_run_time if job else None

    def job_count(self) -> int:
        """Number of live jobs (0 or 1)."""
        if not self.running:
            return 0
        return len(self.scheduler.get_jobs())

    def _add_poll_job(self, run_now: bool) -> None:
        kwargs = {}
        if run_now:
            kwargs['next_run_time'] = datetime.now()

        self.scheduler.add_job(
            func=self.tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=settings.POLL_JOB_ID,
            replace_existing=True,
            **kwargs
        )

    def _job_executed(self, event) -> None:
        logger.debug(f"Tick executed: {event.job_id}")

    def _job_error(self, event) -> None:
        logger.error(
            f"Tick error: {event.job_id}, "
            f"exception: {event.exception}",
            exc_info=event.exception
        )

    def _job_missed(self, event) -> None:
        # Reminders due in a missed minute are not fired late
        logger.warning(f"Tick missed at {event.scheduled_run_time}")
