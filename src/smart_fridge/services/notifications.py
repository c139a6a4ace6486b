"""Expiry alert summarization and dispatch."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from smart_fridge.domain.inventory import Item
from smart_fridge.domain.notifications import (
    EXPIRY_NOTIFICATION_ID,
    EXPIRY_NOTIFICATION_TITLE,
    ExpiryNotification,
)
from smart_fridge.domain.sessions import UserScope

_logger = logging.getLogger(__name__)

MAX_NAMED_ITEMS = 3


class Notifier(Protocol):
    """Platform notifier that shows one notification per slot."""

    async def show(self, scope: UserScope, notification: ExpiryNotification) -> None:
        """Show a notification, replacing any earlier one in the same slot."""


class NotificationSlotRepository(Protocol):
    """Remembers which delivered message currently occupies a slot."""

    def get_message_id(self, user_id: str, slot: int) -> int | None:
        """Return the message shown in a slot, if any."""

    def set_message_id(self, user_id: str, slot: int, message_id: int) -> None:
        """Record the message now shown in a slot."""


def build_expiry_message(names: Sequence[str]) -> str:
    """Summarize expiring item names into a single sentence."""
    listed = ", ".join(names[:MAX_NAMED_ITEMS])
    if len(names) > MAX_NAMED_ITEMS:
        remaining = len(names) - MAX_NAMED_ITEMS
        return f"{listed} and {remaining} more items are expiring soon!"
    verb = "is" if len(names) == 1 else "are"
    return f"{listed} {verb} expiring soon!"


@dataclass
class NotificationDispatcher:
    """Turns a list of expiring items into one alert in a fixed slot."""

    notifier: Notifier

    async def dispatch(
        self, scope: UserScope, items: Sequence[Item]
    ) -> ExpiryNotification:
        """Send a single summarized alert for the given items."""
        if not items:
            raise ValueError("dispatch requires at least one expiring item")
        notification = ExpiryNotification(
            slot=EXPIRY_NOTIFICATION_ID,
            title=EXPIRY_NOTIFICATION_TITLE,
            body=build_expiry_message([item.name for item in items]),
        )
        await self.notifier.show(scope, notification)
        _logger.info(
            "Sent expiry alert for %d items to %s", len(items), scope.namespace
        )
        return notification
