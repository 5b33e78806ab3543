"""Background scheduling for the milestone notifier."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Sequence

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .models.habit import utc_now
from .services.notifier import CycleOutcome, MilestoneNotifier

logger = logging.getLogger("trackhabit.scheduler")

JOB_ID = "milestone_notifier"
RETRY_JOB_ID = "milestone_notifier_retry"

Constraint = Callable[[], bool]


class JobResult(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class BackoffPolicy:
    """Linear retry backoff: attempt ``n`` waits ``n * delay_seconds``."""

    delay_seconds: int = 300
    max_retries: int = 5

    def __post_init__(self) -> None:
        if self.delay_seconds <= 0:
            raise ValueError("delay_seconds must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")

    def delay_for(self, attempt: int) -> timedelta:
        return timedelta(seconds=self.delay_seconds * attempt)


class MilestoneScheduler:
    """Runs the notifier on a fixed interval with retry on failure.

    Only one recurring job exists at a time: scheduling again replaces the
    pending job instead of adding a second one.
    """

    def __init__(
        self,
        notifier: MilestoneNotifier,
        *,
        scheduler: Optional[BackgroundScheduler] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.notifier = notifier
        self.scheduler = scheduler or BackgroundScheduler()
        self._clock = clock
        self._lock = threading.Lock()
        self.constraints: tuple[Constraint, ...] = ()
        self.backoff = BackoffPolicy()
        self.attempts = 0
        self.last_outcome: Optional[CycleOutcome] = None

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self, *, paused: bool = False) -> None:
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return
        self.scheduler.start(paused=paused)
        logger.info("Background scheduler started", extra={"paused": paused})

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Background scheduler stopped")

    def schedule_recurring(
        self,
        interval_days: int,
        constraints: Sequence[Constraint] = (),
        backoff: Optional[BackoffPolicy] = None,
    ) -> None:
        """Register (or replace) the periodic notifier job."""

        if interval_days <= 0:
            raise ValueError("interval_days must be positive")
        with self._lock:
            self.constraints = tuple(constraints)
            self.backoff = backoff or BackoffPolicy()
            self.attempts = 0
        self._remove_retry()
        self.scheduler.add_job(
            func=self.run_once,
            trigger=IntervalTrigger(days=interval_days),
            id=JOB_ID,
            name="Milestone reminder",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(
            "Scheduled milestone notifier",
            extra={
                "interval_days": interval_days,
                "constraints": len(self.constraints),
                "backoff_seconds": self.backoff.delay_seconds,
                "max_retries": self.backoff.max_retries,
            },
        )

    def cancel(self) -> None:
        """Drop the periodic job and any pending retry."""

        for job_id in (JOB_ID, RETRY_JOB_ID):
            if self.scheduler.get_job(job_id) is not None:
                self.scheduler.remove_job(job_id)
        with self._lock:
            self.attempts = 0
        logger.info("Cancelled milestone notifier")

    def is_scheduled(self) -> bool:
        return self.scheduler.get_job(JOB_ID) is not None

    def run_once(self) -> JobResult:
        """Execute one notifier cycle the way the scheduled job does."""

        unmet = [constraint for constraint in self.constraints if not constraint()]
        if unmet:
            logger.info("Constraints not met; skipping notifier run", extra={"unmet": len(unmet)})
            return JobResult.SKIPPED

        try:
            outcome = self.notifier.run(self._clock())
        except Exception as exc:
            logger.error(f"Milestone notifier failed: {exc}", exc_info=True)
            self._schedule_retry()
            return JobResult.FAILURE

        with self._lock:
            self.attempts = 0
            self.last_outcome = outcome
        logger.info("Milestone notifier finished", extra={"result": outcome.result.value})
        return JobResult.SUCCESS

    def _schedule_retry(self) -> None:
        with self._lock:
            self.attempts += 1
            attempt = self.attempts
        if attempt > self.backoff.max_retries:
            logger.error(
                "Milestone notifier gave up after retries",
                extra={"attempts": attempt - 1},
            )
            with self._lock:
                self.attempts = 0
            return

        delay = self.backoff.delay_for(attempt)
        self.scheduler.add_job(
            func=self.run_once,
            trigger=DateTrigger(run_date=self._clock() + delay),
            id=RETRY_JOB_ID,
            name="Milestone reminder retry",
            replace_existing=True,
        )
        logger.warning(
            "Retrying milestone notifier",
            extra={"attempt": attempt, "delay_seconds": int(delay.total_seconds())},
        )

    def _remove_retry(self) -> None:
        if self.scheduler.get_job(RETRY_JOB_ID) is not None:
            self.scheduler.remove_job(RETRY_JOB_ID)


__all__ = [
    "BackoffPolicy",
    "Constraint",
    "JOB_ID",
    "JobResult",
    "MilestoneScheduler",
    "RETRY_JOB_ID",
]
