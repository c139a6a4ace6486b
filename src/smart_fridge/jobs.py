"""Background job entry points.

Job functions are referenced by their import path so persistent job stores can
load them in a fresh process. Each run builds its own container and resolves
the session again; nothing is shared with the foreground app.
"""

import logging

from smart_fridge.config import Settings
from smart_fridge.containers import AppContainer, build_container
from smart_fridge.services.expiry import ExpiryScanError, ScanOutcome, ScanReport

_logger = logging.getLogger(__name__)


async def execute_expiry_check(container: AppContainer) -> ScanReport:
    """Run the expiry scan if the platform constraints allow it."""
    if not container.constraint.satisfied():
        _logger.info("Battery too low, deferring expiry check")
        return ScanReport(outcome=ScanOutcome.DEFERRED)
    report = await container.expiry_scanner.run()
    if report.outcome is ScanOutcome.FAILURE:
        raise ExpiryScanError("Expiry check failed") from report.error
    return report


async def run_expiry_check() -> ScanOutcome:
    """Scheduled job: scan once and return the outcome to the scheduler."""
    container = build_container(Settings())
    try:
        report = await execute_expiry_check(container)
    finally:
        await container.close_resources()
    return report.outcome
