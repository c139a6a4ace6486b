"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest

from smart_fridge.adapters.telegram_client import TelegramClient
from smart_fridge.config import Settings
from smart_fridge.containers import AppContainer
from smart_fridge.domain.inventory import CollectionKind, Entity
from smart_fridge.domain.notifications import ExpiryNotification
from smart_fridge.domain.sessions import UserScope, UserSession
from smart_fridge.services.collections import CollectionRepository, RemoteStoreError
from smart_fridge.services.expiry import ExpiryScanner
from smart_fridge.services.inventory import InventoryService
from smart_fridge.services.live import ChangeFeed, ChangeListener, LiveCollections
from smart_fridge.services.notifications import (
    NotificationDispatcher,
    NotificationSlotRepository,
    Notifier,
)
from smart_fridge.services.recipes import RecipeService, TextGenerator
from smart_fridge.services.scheduling import ConstraintChecker
from smart_fridge.services.sessions import SessionResolver, SessionStore

TODAY = date(2024, 5, 10)


@dataclass(eq=False)
class FakeChangeListener(ChangeListener):
    """Listener handle that records whether it was released."""

    feed: "FakeChangeFeed"
    key: tuple[str, CollectionKind]
    on_event: Callable[[], None]
    closed: bool = False

    async def close(self) -> None:
        self.closed = True
        listeners = self.feed.listeners.get(self.key, [])
        if self in listeners:
            listeners.remove(self)


@dataclass
class FakeChangeFeed(ChangeFeed):
    """Change feed driven by the tests or by the in-memory repository."""

    listeners: dict[tuple[str, CollectionKind], list[FakeChangeListener]] = field(
        default_factory=dict
    )
    fail_listen: bool = False

    async def listen(
        self, scope: UserScope, kind: CollectionKind, on_event: Callable[[], None]
    ) -> ChangeListener:
        if self.fail_listen:
            raise RemoteStoreError("realtime unavailable")
        key = (scope.user_id, kind)
        listener = FakeChangeListener(feed=self, key=key, on_event=on_event)
        self.listeners.setdefault(key, []).append(listener)
        return listener

    def emit(self, user_id: str, kind: CollectionKind) -> None:
        for listener in list(self.listeners.get((user_id, kind), [])):
            listener.on_event()

    def active(self, user_id: str, kind: CollectionKind) -> int:
        return len(self.listeners.get((user_id, kind), []))


@dataclass
class InMemoryCollectionRepository(CollectionRepository):
    """In-memory collection repository for tests."""

    documents: dict[tuple[str, CollectionKind], dict[str, Entity]] = field(
        default_factory=dict
    )
    feed: FakeChangeFeed | None = None
    fail_reads: bool = False
    fail_writes: bool = False
    reads: int = 0

    def read(self, scope: UserScope, kind: CollectionKind) -> list[Entity]:
        self.reads += 1
        if self.fail_reads:
            raise RemoteStoreError(f"Failed to read {kind.table}")
        return list(self.documents.get((scope.user_id, kind), {}).values())

    def upsert(self, scope: UserScope, entity: Entity) -> None:
        if self.fail_writes:
            raise RemoteStoreError(f"Failed to write {entity.id}")
        kind = CollectionKind.of(entity)
        self.documents.setdefault((scope.user_id, kind), {})[entity.id] = entity
        self._changed(scope, kind)

    def delete(self, scope: UserScope, kind: CollectionKind, entity_id: str) -> None:
        if self.fail_writes:
            raise RemoteStoreError(f"Failed to delete {entity_id}")
        self.documents.get((scope.user_id, kind), {}).pop(entity_id, None)
        self._changed(scope, kind)

    def seed(self, scope: UserScope, *entities: Entity) -> None:
        for entity in entities:
            kind = CollectionKind.of(entity)
            self.documents.setdefault((scope.user_id, kind), {})[entity.id] = entity

    def _changed(self, scope: UserScope, kind: CollectionKind) -> None:
        if self.feed is not None:
            self.feed.emit(scope.user_id, kind)


@dataclass
class InMemorySessionStore(SessionStore):
    """In-memory session store for tests."""

    session: UserSession | None = None

    def current_user(self) -> UserSession | None:
        return self.session

    def save(self, session: UserSession) -> None:
        self.session = session

    def clear(self) -> None:
        self.session = None


@dataclass
class FakeNotifier(Notifier):
    """Notifier that keeps only the latest notification per slot."""

    shown: list[tuple[str, ExpiryNotification]] = field(default_factory=list)
    slots: dict[int, ExpiryNotification] = field(default_factory=dict)
    fail: bool = False

    async def show(self, scope: UserScope, notification: ExpiryNotification) -> None:
        if self.fail:
            raise RuntimeError("notifier unavailable")
        self.shown.append((scope.user_id, notification))
        self.slots[notification.slot] = notification


@dataclass
class InMemorySlotRepository(NotificationSlotRepository):
    """In-memory notification slot repository for tests."""

    message_ids: dict[tuple[str, int], int] = field(default_factory=dict)
    fail_writes: bool = False

    def get_message_id(self, user_id: str, slot: int) -> int | None:
        return self.message_ids.get((user_id, slot))

    def set_message_id(self, user_id: str, slot: int, message_id: int) -> None:
        if self.fail_writes:
            raise RemoteStoreError("Failed to write notification slot")
        self.message_ids[(user_id, slot)] = message_id


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, int, str]] = field(default_factory=list)
    deleted: list[tuple[int, int]] = field(default_factory=list)
    next_message_id: int = 100
    fail_delete: bool = False

    async def send_message(self, chat_id: int, text: str) -> int:
        self.next_message_id += 1
        self.messages.append((chat_id, self.next_message_id, text))
        return self.next_message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        if self.fail_delete:
            raise RuntimeError("Telegram deleteMessage failed")
        self.deleted.append((chat_id, message_id))


@dataclass
class FakeTextGenerator(TextGenerator):
    """Text generator returning a canned answer."""

    text: str = "**Ingredients & Seasonings:**\n- eggs"
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@dataclass
class FakeConstraint(ConstraintChecker):
    """Constraint with a fixed answer."""

    ok: bool = True

    def satisfied(self) -> bool:
        return self.ok


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        telegram_chat_id=42,
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoic2VydmljZV9yb2xlIn0.signature"
        ),
        openai_api_key="openai-key",
        session_file=tmp_path / "session.json",
    )


@pytest.fixture
def scope() -> UserScope:
    return UserScope(user_id="user-1", label="ada@example.com")


@pytest.fixture
def change_feed() -> FakeChangeFeed:
    return FakeChangeFeed()


@pytest.fixture
def repository(change_feed: FakeChangeFeed) -> InMemoryCollectionRepository:
    return InMemoryCollectionRepository(feed=change_feed)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def text_generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest.fixture
def constraint() -> FakeConstraint:
    return FakeConstraint()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    repository: InMemoryCollectionRepository,
    change_feed: FakeChangeFeed,
    session_store: InMemorySessionStore,
    notifier: FakeNotifier,
    text_generator: FakeTextGenerator,
    constraint: FakeConstraint,
) -> AppContainer:
    session_resolver = SessionResolver(session_store)
    dispatcher = NotificationDispatcher(notifier)
    scanner = ExpiryScanner(
        session_resolver=session_resolver,
        repository=repository,
        dispatcher=dispatcher,
        threshold_days=settings.expiry_threshold_days,
        today=lambda: TODAY,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_resolver=session_resolver,
        inventory_service=InventoryService(repository),
        live_collections=LiveCollections(repository=repository, feed=change_feed),
        recipe_service=RecipeService(generator=text_generator, repository=repository),
        notification_dispatcher=dispatcher,
        expiry_scanner=scanner,
        constraint=constraint,
        close_resources=close_resources,
    )
