"""Persistence ports for the per-user collections."""

from typing import Protocol

from smart_fridge.domain.inventory import CollectionKind, Entity
from smart_fridge.domain.sessions import UserScope


class RemoteStoreError(RuntimeError):
    """Raised when the remote store cannot complete an operation."""


class CollectionRepository(Protocol):
    """CRUD access to the items, categories and recipes of one user."""

    def read(self, scope: UserScope, kind: CollectionKind) -> list[Entity]:
        """Return the current contents of a collection."""

    def upsert(self, scope: UserScope, entity: Entity) -> None:
        """Create or fully replace an entity keyed by its id."""

    def delete(self, scope: UserScope, kind: CollectionKind, entity_id: str) -> None:
        """Delete an entity by id; missing ids are ignored."""
