"""Registration of the recurring expiry check with APScheduler.

There is at most one recurring expiry job, identified by ``EXPIRY_JOB_ID``.
Registration keeps an existing job instead of replacing it, so restarting the
worker against a persistent job store never resets the schedule.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Protocol

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.job import Job
from apscheduler.jobstores.base import ConflictingIdError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from smart_fridge.services.expiry import ScanOutcome

_logger = logging.getLogger(__name__)

EXPIRY_JOB_ID = "expiry_check_work"
DEFERRED_JOB_ID = f"{EXPIRY_JOB_ID}:deferred"
EXPIRY_JOB_FUNC = "smart_fridge.jobs:run_expiry_check"

DEFAULT_INTERVAL = timedelta(days=1)
DEFAULT_INITIAL_DELAY = timedelta(hours=1)
DEFAULT_RETRY_DELAY = timedelta(minutes=30)


class ConstraintChecker(Protocol):
    """Platform condition that must hold before the scan runs."""

    def satisfied(self) -> bool:
        """Return True when the job may run now."""


def register_expiry_check(
    scheduler: BaseScheduler,
    interval: timedelta = DEFAULT_INTERVAL,
    initial_delay: timedelta = DEFAULT_INITIAL_DELAY,
    now: datetime | None = None,
) -> Job:
    """Register the recurring expiry check unless it already exists."""
    existing = scheduler.get_job(EXPIRY_JOB_ID)
    if existing is not None:
        _logger.info("Expiry check already scheduled, keeping existing job")
        return existing
    start = (now or datetime.now(tz=UTC)) + initial_delay
    try:
        job = scheduler.add_job(
            EXPIRY_JOB_FUNC,
            trigger=IntervalTrigger(
                seconds=int(interval.total_seconds()), start_date=start
            ),
            id=EXPIRY_JOB_ID,
            name="Daily expiry check",
            replace_existing=False,
            max_instances=1,
            coalesce=True,
        )
    except ConflictingIdError:
        job = scheduler.get_job(EXPIRY_JOB_ID)
        if job is None:
            raise
        _logger.info("Expiry check registered concurrently, keeping existing job")
        return job
    _logger.info("Scheduled expiry check every %s starting %s", interval, start)
    return job


def defer_expiry_check(
    scheduler: BaseScheduler,
    retry_delay: timedelta = DEFAULT_RETRY_DELAY,
    now: datetime | None = None,
) -> Job:
    """Schedule a one-off retry; a retry that is already pending is kept."""
    existing = scheduler.get_job(DEFERRED_JOB_ID)
    if existing is not None:
        return existing
    run_date = (now or datetime.now(tz=UTC)) + retry_delay
    job = scheduler.add_job(
        EXPIRY_JOB_FUNC,
        trigger=DateTrigger(run_date=run_date),
        id=DEFERRED_JOB_ID,
        name="Deferred expiry check",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    _logger.info("Constraints not met, retrying expiry check at %s", run_date)
    return job


def handle_job_event(
    scheduler: BaseScheduler,
    event: JobExecutionEvent,
    retry_delay: timedelta = DEFAULT_RETRY_DELAY,
) -> None:
    """React to expiry job results reported by the scheduler."""
    if event.job_id not in {EXPIRY_JOB_ID, DEFERRED_JOB_ID}:
        return
    if event.exception is not None:
        _logger.error("Expiry check failed: %s", event.exception)
        return
    if event.retval is ScanOutcome.DEFERRED:
        defer_expiry_check(scheduler, retry_delay)


def install_job_listener(
    scheduler: BaseScheduler, retry_delay: timedelta = DEFAULT_RETRY_DELAY
) -> None:
    """Attach the expiry job result handler to a scheduler."""
    scheduler.add_listener(
        lambda event: handle_job_event(scheduler, event, retry_delay),
        EVENT_JOB_EXECUTED | EVENT_JOB_ERROR,
    )
