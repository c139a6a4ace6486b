"""Domain models for the signed-in user."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserSession:
    """The user currently signed in on this device."""

    id: str
    label: str


@dataclass(frozen=True)
class UserScope:
    """Namespace that every per-user collection lives under."""

    user_id: str
    label: str = ""

    @property
    def namespace(self) -> str:
        return f"users/{self.user_id}"

    @classmethod
    def for_session(cls, session: UserSession) -> "UserScope":
        return cls(user_id=session.id, label=session.label)
