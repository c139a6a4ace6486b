"""Expiry alerts delivered as Telegram messages."""

import logging
from dataclasses import dataclass

import httpx

from smart_fridge.adapters.telegram_client import TelegramClient
from smart_fridge.domain.notifications import ExpiryNotification
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.notifications import NotificationSlotRepository, Notifier

_logger = logging.getLogger(__name__)


@dataclass
class TelegramNotifier(Notifier):
    """Posts alerts to a chat, keeping one live message per slot.

    The new message is sent first and the message that held the slot before
    is deleted afterwards, so the user never ends up with no alert at all.
    If the new message cannot be recorded in its slot it is deleted again, so
    a failed alert never leaves an untracked message behind.

    All alerts go to the single configured ``chat_id``. Slots are still kept
    per user, but delivery is not; this matches the one signed-in session the
    worker serves.
    """

    telegram_client: TelegramClient
    chat_id: int
    slots: NotificationSlotRepository

    async def show(self, scope: UserScope, notification: ExpiryNotification) -> None:
        """Send the alert and retire the previous one in the same slot."""
        previous = self.slots.get_message_id(scope.user_id, notification.slot)
        message_id = await self.telegram_client.send_message(
            chat_id=self.chat_id,
            text=f"{notification.title}\n{notification.body}",
        )
        try:
            self.slots.set_message_id(scope.user_id, notification.slot, message_id)
        except Exception:
            await self._retract(message_id)
            raise
        if previous is None or previous == message_id:
            return
        try:
            await self.telegram_client.delete_message(self.chat_id, previous)
        except (httpx.HTTPError, RuntimeError):
            _logger.warning(
                "Could not delete previous alert %s in slot %s",
                previous,
                notification.slot,
                exc_info=True,
            )

    async def _retract(self, message_id: int) -> None:
        try:
            await self.telegram_client.delete_message(self.chat_id, message_id)
        except (httpx.HTTPError, RuntimeError):
            _logger.warning(
                "Could not retract unrecorded alert %s", message_id, exc_info=True
            )
