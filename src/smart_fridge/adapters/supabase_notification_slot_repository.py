"""Supabase repository for notification slots."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from smart_fridge.services.notifications import NotificationSlotRepository


@dataclass
class SupabaseNotificationSlotRepository(NotificationSlotRepository):
    """Supabase implementation for notification slot bookkeeping."""

    client: Client

    def get_message_id(self, user_id: str, slot: int) -> int | None:
        """Return the message id stored for a user's slot."""
        response = (
            self.client.table("notification_slots")
            .select("message_id")
            .eq("user_id", user_id)
            .eq("slot", slot)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        message_id = response.data[0].get("message_id")
        return int(message_id) if message_id is not None else None

    def set_message_id(self, user_id: str, slot: int, message_id: int) -> None:
        """Store the message id for a user's slot."""
        self.client.table("notification_slots").upsert(
            {
                "user_id": user_id,
                "slot": slot,
                "message_id": message_id,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id,slot",
        ).execute()
