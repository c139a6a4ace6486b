"""Resolution of the signed-in user to a collection scope."""

import logging
from dataclasses import dataclass
from typing import Protocol

from smart_fridge.domain.sessions import UserScope, UserSession

_logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Durable local storage for the current session."""

    def current_user(self) -> UserSession | None:
        """Return the signed-in user, if any."""

    def save(self, session: UserSession) -> None:
        """Persist the signed-in user."""

    def clear(self) -> None:
        """Forget the signed-in user."""


@dataclass
class SessionResolver:
    """Maps the stored session to the scope used by the repositories.

    The store is read on every call. The background job and the API run in
    separate processes and only share what the store has persisted.
    """

    store: SessionStore

    def resolve(self) -> UserScope | None:
        """Return the scope of the signed-in user, or None when signed out."""
        session = self.store.current_user()
        if session is None:
            return None
        return UserScope.for_session(session)

    def login(self, user_id: str, label: str) -> UserScope:
        """Persist a new current session and return its scope."""
        session = UserSession(id=user_id, label=label)
        self.store.save(session)
        _logger.info("Signed in %s", label)
        return UserScope.for_session(session)

    def logout(self) -> None:
        """Clear the current session."""
        self.store.clear()
