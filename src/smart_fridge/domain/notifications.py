"""Notification models."""

from dataclasses import dataclass

EXPIRY_NOTIFICATION_ID = 1001
EXPIRY_NOTIFICATION_TITLE = "Food Expiring Soon"


@dataclass(frozen=True)
class ExpiryNotification:
    """A user-facing alert bound to a fixed slot.

    Posting to a slot replaces whatever notification occupied it before.
    """

    slot: int
    title: str
    body: str
