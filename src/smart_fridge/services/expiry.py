"""Expiry scanning over the current user's items."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from smart_fridge.domain.inventory import CollectionKind, Item
from smart_fridge.services.collections import CollectionRepository
from smart_fridge.services.notifications import NotificationDispatcher
from smart_fridge.services.sessions import SessionResolver

_logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_DAYS = 3


class ExpiryScanError(RuntimeError):
    """Raised by the background job when a scan fails."""


class ScanOutcome(Enum):
    """Result reported to the scheduler."""

    SUCCESS = "success"
    SKIPPED_NO_SESSION = "skipped_no_session"
    DEFERRED = "deferred"
    FAILURE = "failure"


@dataclass(frozen=True)
class ScanReport:
    """Outcome of one scan."""

    outcome: ScanOutcome
    user_id: str | None = None
    expiring: list[Item] = field(default_factory=list)
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not ScanOutcome.FAILURE


def days_until_expiry(item: Item, today: date) -> int | None:
    """Return whole calendar days until expiry, or None for malformed dates."""
    expiry = item.expiry()
    if expiry is None:
        return None
    return (expiry - today).days


def find_expiring(
    items: Iterable[Item], today: date, threshold_days: int = DEFAULT_THRESHOLD_DAYS
) -> list[Item]:
    """Select items expiring within ``[0, threshold_days]`` days, keeping order.

    Already expired items and items with malformed dates are left out.
    """
    expiring = []
    for item in items:
        days = days_until_expiry(item, today)
        if days is None:
            _logger.debug(
                "Skipping %s: unparseable expiry %r", item.id, item.expiry_date
            )
            continue
        if 0 <= days <= threshold_days:
            expiring.append(item)
    return expiring


@dataclass
class ExpiryScanner:
    """Reads the signed-in user's items and alerts about those expiring soon."""

    session_resolver: SessionResolver
    repository: CollectionRepository
    dispatcher: NotificationDispatcher
    threshold_days: int = DEFAULT_THRESHOLD_DAYS
    today: Callable[[], date] = date.today

    async def run(self) -> ScanReport:
        """Run one scan and report a single outcome."""
        scope = self.session_resolver.resolve()
        if scope is None:
            _logger.info("No signed-in user, skipping expiry scan")
            return ScanReport(outcome=ScanOutcome.SKIPPED_NO_SESSION)
        try:
            entities = await asyncio.to_thread(
                self.repository.read, scope, CollectionKind.ITEMS
            )
            items = [entity for entity in entities if isinstance(entity, Item)]
            expiring = find_expiring(items, self.today(), self.threshold_days)
            if expiring:
                await self.dispatcher.dispatch(scope, expiring)
        except Exception as exc:
            _logger.exception("Expiry scan failed for %s", scope.namespace)
            return ScanReport(
                outcome=ScanOutcome.FAILURE, user_id=scope.user_id, error=exc
            )
        _logger.info(
            "Expiry scan for %s found %d of %d items expiring",
            scope.namespace,
            len(expiring),
            len(items),
        )
        return ScanReport(
            outcome=ScanOutcome.SUCCESS, user_id=scope.user_id, expiring=expiring
        )
