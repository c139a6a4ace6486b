"""Background worker process that owns the expiry check schedule."""

import asyncio
import logging
import signal
from datetime import timedelta

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from smart_fridge.app_logging import configure_logging
from smart_fridge.config import Settings
from smart_fridge.services.scheduling import install_job_listener, register_expiry_check

_logger = logging.getLogger(__name__)


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """Create a scheduler, persisting jobs when a job store URL is configured."""
    if settings.job_store_url:
        jobstore = SQLAlchemyJobStore(url=settings.job_store_url)
    else:
        jobstore = MemoryJobStore()
    scheduler = AsyncIOScheduler(jobstores={"default": jobstore})
    install_job_listener(
        scheduler, retry_delay=timedelta(minutes=settings.constraint_retry_minutes)
    )
    return scheduler


async def serve(settings: Settings) -> None:
    """Start the scheduler and run until interrupted."""
    scheduler = create_scheduler(settings)
    scheduler.start()
    register_expiry_check(
        scheduler,
        interval=timedelta(hours=settings.scan_interval_hours),
        initial_delay=timedelta(minutes=settings.scan_initial_delay_minutes),
    )
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)
    _logger.info("Worker started")
    try:
        await stop.wait()
    finally:
        scheduler.shutdown(wait=False)
        _logger.info("Worker stopped")


def main() -> None:
    """Console entry point for the background worker."""
    configure_logging()
    asyncio.run(serve(Settings()))


if __name__ == "__main__":
    main()
