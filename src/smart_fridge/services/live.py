"""Live subscriptions over the per-user collections.

Every subscription owns one bounded queue and one consumer task. Change events
from the remote feed only enqueue a refresh request; the consumer task turns
each request into a point-in-time read and hands the snapshot to the callback.
Deliveries for one subscription therefore never overlap, and a burst of
changes collapses into a single refresh.
"""

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from smart_fridge.domain.inventory import (
    Category,
    CollectionKind,
    Entity,
    Item,
    Recipe,
    sort_by_expiry,
)
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.collections import CollectionRepository

_logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[Entity]], Awaitable[None] | None]
ErrorCallback = Callable[[Exception], Awaitable[None] | None]


class ChangeListener(Protocol):
    """Handle for a registered remote change listener."""

    async def close(self) -> None:
        """Stop receiving change events."""


class ChangeFeed(Protocol):
    """Source of remote change events for a collection."""

    async def listen(
        self, scope: UserScope, kind: CollectionKind, on_event: Callable[[], None]
    ) -> ChangeListener:
        """Call ``on_event`` whenever the collection changes remotely."""


async def _invoke(callback: Callable[..., object], *args: object) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class Subscription:
    """A live registration delivering snapshots of one collection."""

    def __init__(  # noqa: PLR0913
        self,
        scope: UserScope,
        kind: CollectionKind,
        repository: CollectionRepository,
        feed: ChangeFeed,
        on_change: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.scope = scope
        self.kind = kind
        self._repository = repository
        self._feed = feed
        self._on_change = on_change
        self._on_error = on_error
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue[None] = asyncio.Queue(maxsize=1)
        self._task: asyncio.Task[None] | None = None
        self._listener: ChangeListener | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Register the remote listener and queue the initial snapshot."""
        self._listener = await self._feed.listen(self.scope, self.kind, self.notify)
        self._enqueue()
        self._task = asyncio.create_task(
            self._consume(),
            name=f"subscription:{self.scope.namespace}/{self.kind.table}",
        )

    def notify(self) -> None:
        """Request a fresh snapshot. Safe to call from any thread."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._enqueue()
        else:
            self._loop.call_soon_threadsafe(self._enqueue)

    async def wait_idle(self) -> None:
        """Wait until every requested snapshot has been delivered."""
        if self._closed:
            return
        await self._queue.join()

    async def close(self) -> None:
        """Release the remote listener and stop delivering snapshots."""
        if self._closed:
            return
        self._closed = True
        if self._listener is not None:
            try:
                await self._listener.close()
            except Exception:
                _logger.warning(
                    "Failed to release listener for %s/%s",
                    self.scope.namespace,
                    self.kind.table,
                    exc_info=True,
                )
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _enqueue(self) -> None:
        if self._closed:
            return
        with contextlib.suppress(asyncio.QueueFull):
            self._queue.put_nowait(None)

    async def _consume(self) -> None:
        while True:
            await self._queue.get()
            try:
                await self._deliver()
            finally:
                self._queue.task_done()

    async def _deliver(self) -> None:
        try:
            snapshot = await asyncio.to_thread(
                self._repository.read, self.scope, self.kind
            )
        except Exception as exc:
            _logger.warning(
                "Dropped change for %s/%s: snapshot read failed",
                self.scope.namespace,
                self.kind.table,
                exc_info=True,
            )
            await self._degraded(exc)
            return
        try:
            await _invoke(self._on_change, snapshot)
        except Exception as exc:
            _logger.exception(
                "Subscriber for %s/%s failed", self.scope.namespace, self.kind.table
            )
            await self._degraded(exc)

    async def _degraded(self, exc: Exception) -> None:
        if self._on_error is None:
            return
        try:
            await _invoke(self._on_error, exc)
        except Exception:
            _logger.exception("Degraded-subscription handler failed")


@dataclass
class LiveCollections:
    """Opens live subscriptions backed by a repository and a change feed."""

    repository: CollectionRepository
    feed: ChangeFeed

    async def subscribe(
        self,
        scope: UserScope,
        kind: CollectionKind,
        on_change: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Start a subscription; the first snapshot is delivered right away."""
        subscription = Subscription(
            scope=scope,
            kind=kind,
            repository=self.repository,
            feed=self.feed,
            on_change=on_change,
            on_error=on_error,
        )
        await subscription.start()
        _logger.info("Subscribed to %s/%s", scope.namespace, kind.table)
        return subscription


@dataclass
class InventoryView:
    """Local view of one user's collections kept current by subscriptions."""

    live: LiveCollections
    scope: UserScope
    items: list[Item] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    recipes: list[Recipe] = field(default_factory=list)
    errors: dict[CollectionKind, Exception] = field(default_factory=dict)
    _subscriptions: list[Subscription] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return bool(self._subscriptions)

    @property
    def degraded(self) -> bool:
        """True when the latest refresh of any collection failed."""
        return bool(self.errors)

    async def open(self) -> None:
        """Subscribe to items, categories and recipes."""
        if self._subscriptions:
            return
        handlers = {
            CollectionKind.ITEMS: self._set_items,
            CollectionKind.CATEGORIES: self._set_categories,
            CollectionKind.RECIPES: self._set_recipes,
        }
        opened: list[Subscription] = []
        try:
            for kind, handler in handlers.items():
                opened.append(
                    await self.live.subscribe(
                        self.scope, kind, handler, self._error_handler(kind)
                    )
                )
        except Exception:
            for subscription in opened:
                await subscription.close()
            raise
        self._subscriptions = opened

    async def wait_idle(self) -> None:
        """Wait for pending snapshots on every subscription."""
        for subscription in self._subscriptions:
            await subscription.wait_idle()

    async def close(self) -> None:
        """Release every subscription held by the view."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            await subscription.close()

    def _set_items(self, snapshot: list[Entity]) -> None:
        self.items = sort_by_expiry(e for e in snapshot if isinstance(e, Item))
        self.errors.pop(CollectionKind.ITEMS, None)

    def _set_categories(self, snapshot: list[Entity]) -> None:
        self.categories = [e for e in snapshot if isinstance(e, Category)]
        self.errors.pop(CollectionKind.CATEGORIES, None)

    def _set_recipes(self, snapshot: list[Entity]) -> None:
        self.recipes = [e for e in snapshot if isinstance(e, Recipe)]
        self.errors.pop(CollectionKind.RECIPES, None)

    def _error_handler(self, kind: CollectionKind) -> Callable[[Exception], None]:
        def handle(exc: Exception) -> None:
            self.errors[kind] = exc

        return handle
