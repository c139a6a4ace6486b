"""Current-session storage in a local JSON file."""

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ValidationError

from smart_fridge.domain.sessions import UserSession
from smart_fridge.services.sessions import SessionStore

_logger = logging.getLogger(__name__)


class StoredSession(BaseModel):
    """On-disk representation of the signed-in user."""

    id: str
    label: str


@dataclass
class FileSessionStore(SessionStore):
    """Keeps the signed-in user in a JSON file that survives restarts."""

    path: Path

    def current_user(self) -> UserSession | None:
        """Return the stored user; a missing or unreadable file means none."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            _logger.warning("Cannot read session file %s", self.path, exc_info=True)
            return None
        try:
            stored = StoredSession.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Ignoring corrupt session file %s", self.path)
            return None
        return UserSession(id=stored.id, label=stored.label)

    def save(self, session: UserSession) -> None:
        """Write the user to the session file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        stored = StoredSession(id=session.id, label=session.label)
        self.path.write_text(stored.model_dump_json(), encoding="utf-8")

    def clear(self) -> None:
        """Remove the session file."""
        self.path.unlink(missing_ok=True)
