"""Repeating timer abstraction used by the monitoring scheduler."""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)

TickCallback = Callable[[], Awaitable[None]]


class RepeatingTimer(ABC):
    """Schedules one repeating callback at a time."""

    @abstractmethod
    def schedule(self, callback: TickCallback, interval_seconds: float) -> None:
        """Arm the timer; replaces any previously scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Disarm the timer. Safe to call when nothing is scheduled."""

    @property
    @abstractmethod
    def armed(self) -> bool:
        """Whether a callback is currently scheduled."""

    def shutdown(self) -> None:
        """Release the timer backend."""
        self.cancel()


class APSchedulerTimer(RepeatingTimer):
    """
    RepeatingTimer backed by APScheduler's AsyncIOScheduler.

    The job runs with ``max_instances=1`` and ``coalesce=True`` so ticks that
    fall due while the previous one is still executing are merged.
    """

    JOB_ID = "probe_cycle"

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None):
        self.scheduler = scheduler or AsyncIOScheduler()

    @property
    def armed(self) -> bool:
        return self.scheduler.get_job(self.JOB_ID) is not None

    def schedule(self, callback: TickCallback, interval_seconds: float) -> None:
        if not self.scheduler.running:
            self.scheduler.start()

        job = self.scheduler.add_job(
            callback,
            trigger=IntervalTrigger(seconds=interval_seconds),
            id=self.JOB_ID,
            name="Probe cycle",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )

        logger.info(
            "Probe cycle timer armed",
            extra={
                "job_id": job.id,
                "interval_seconds": interval_seconds,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None
            }
        )

    def cancel(self) -> None:
        try:
            self.scheduler.remove_job(self.JOB_ID)
        except JobLookupError:
            return
        logger.info("Probe cycle timer disarmed", extra={"job_id": self.JOB_ID})

    def shutdown(self) -> None:
        self.cancel()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
