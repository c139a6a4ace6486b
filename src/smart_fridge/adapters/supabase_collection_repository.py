"""Supabase repository for the per-user collections."""

import logging
from dataclasses import dataclass

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from smart_fridge.domain.inventory import (
    CollectionKind,
    Entity,
    from_document,
    to_document,
)
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.collections import CollectionRepository, RemoteStoreError

_logger = logging.getLogger(__name__)

_COLUMNS = {
    CollectionKind.ITEMS: "id, name, expiryDate, area, notes, quantity",
    CollectionKind.CATEGORIES: "id, name",
    CollectionKind.RECIPES: "id, name, content",
}
_REMOTE_ERRORS = (APIError, httpx.HTTPError)


@dataclass
class SupabaseCollectionRepository(CollectionRepository):
    """Stores each collection in its own table, partitioned by ``user_id``."""

    client: Client

    def read(self, scope: UserScope, kind: CollectionKind) -> list[Entity]:
        """Return every row of a collection for the user."""
        try:
            response = (
                self.client.table(kind.table)
                .select(_COLUMNS[kind])
                .eq("user_id", scope.user_id)
                .execute()
            )
        except _REMOTE_ERRORS as exc:
            raise RemoteStoreError(f"Failed to read {kind.table}") from exc
        return _parse_rows(kind, response.data or [])

    def upsert(self, scope: UserScope, entity: Entity) -> None:
        """Insert or fully replace a row keyed by user and id."""
        kind = CollectionKind.of(entity)
        payload = {"user_id": scope.user_id, **to_document(entity)}
        try:
            self.client.table(kind.table).upsert(
                payload, on_conflict="user_id,id"
            ).execute()
        except _REMOTE_ERRORS as exc:
            raise RemoteStoreError(f"Failed to write {kind.table}/{entity.id}") from exc

    def delete(self, scope: UserScope, kind: CollectionKind, entity_id: str) -> None:
        """Delete a row; deleting a missing row matches nothing and succeeds."""
        try:
            self.client.table(kind.table).delete().eq("user_id", scope.user_id).eq(
                "id", entity_id
            ).execute()
        except _REMOTE_ERRORS as exc:
            message = f"Failed to delete {kind.table}/{entity_id}"
            raise RemoteStoreError(message) from exc


def _parse_rows(kind: CollectionKind, rows: list[dict[str, object]]) -> list[Entity]:
    entities = []
    for row in rows:
        if not row.get("id"):
            _logger.warning("Ignoring %s row without id", kind.table)
            continue
        entities.append(from_document(kind, row))
    return entities
