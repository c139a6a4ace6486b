"""Supabase Realtime change feed."""

from collections.abc import Callable
from dataclasses import dataclass, field

from supabase import AsyncClient, acreate_client

from smart_fridge.domain.inventory import CollectionKind
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.live import ChangeFeed, ChangeListener


@dataclass
class SupabaseChannelListener(ChangeListener):
    """Realtime channel registered for one collection."""

    client: AsyncClient
    channel: object

    async def close(self) -> None:
        """Unsubscribe and drop the channel."""
        await self.client.remove_channel(self.channel)


@dataclass
class SupabaseChangeFeed(ChangeFeed):
    """Postgres change notifications delivered over Supabase Realtime."""

    supabase_url: str
    supabase_key: str
    schema: str = "public"
    _client: AsyncClient | None = field(default=None, repr=False)

    @classmethod
    def create(cls, supabase_url: str, supabase_key: str) -> "SupabaseChangeFeed":
        """Create a feed; the realtime connection opens on first use."""
        return cls(supabase_url=supabase_url, supabase_key=supabase_key)

    async def listen(
        self, scope: UserScope, kind: CollectionKind, on_event: Callable[[], None]
    ) -> ChangeListener:
        """Subscribe to inserts, updates and deletes of the user's rows."""
        client = await self._connect()
        channel = client.channel(f"{scope.namespace}/{kind.table}")
        channel.on_postgres_changes(
            "*",
            schema=self.schema,
            table=kind.table,
            filter=f"user_id=eq.{scope.user_id}",
            callback=lambda _payload: on_event(),
        )
        await channel.subscribe()
        return SupabaseChannelListener(client=client, channel=channel)

    async def close(self) -> None:
        """Drop every channel opened through this feed."""
        if self._client is None:
            return
        await self._client.remove_all_channels()
        self._client = None

    async def _connect(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self.supabase_url, self.supabase_key)
        return self._client
