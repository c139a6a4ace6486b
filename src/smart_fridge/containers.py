"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from smart_fridge.adapters.file_session_store import FileSessionStore
from smart_fridge.adapters.openai_text_client import OpenAITextGenerator
from smart_fridge.adapters.psutil_battery import BatteryConstraint
from smart_fridge.adapters.supabase_change_feed import SupabaseChangeFeed
from smart_fridge.adapters.supabase_collection_repository import (
    SupabaseCollectionRepository,
)
from smart_fridge.adapters.supabase_notification_slot_repository import (
    SupabaseNotificationSlotRepository,
)
from smart_fridge.adapters.telegram_client import HttpxTelegramClient
from smart_fridge.adapters.telegram_notifier import TelegramNotifier
from smart_fridge.config import Settings
from smart_fridge.services.expiry import ExpiryScanner
from smart_fridge.services.inventory import InventoryService
from smart_fridge.services.live import LiveCollections
from smart_fridge.services.notifications import NotificationDispatcher
from smart_fridge.services.recipes import RecipeService
from smart_fridge.services.scheduling import ConstraintChecker
from smart_fridge.services.sessions import SessionResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_resolver: SessionResolver
    inventory_service: InventoryService
    live_collections: LiveCollections
    recipe_service: RecipeService
    notification_dispatcher: NotificationDispatcher
    expiry_scanner: ExpiryScanner
    constraint: ConstraintChecker
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    repository = SupabaseCollectionRepository(supabase_client)
    slot_repository = SupabaseNotificationSlotRepository(supabase_client)
    change_feed = SupabaseChangeFeed.create(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_resolver = SessionResolver(FileSessionStore(resolved_settings.session_file))
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    text_generator = OpenAITextGenerator.create(
        api_key=resolved_settings.openai_api_key,
        model=resolved_settings.openai_model,
    )
    dispatcher = NotificationDispatcher(
        TelegramNotifier(
            telegram_client=telegram_client,
            chat_id=resolved_settings.telegram_chat_id,
            slots=slot_repository,
        )
    )
    scanner = ExpiryScanner(
        session_resolver=session_resolver,
        repository=repository,
        dispatcher=dispatcher,
        threshold_days=resolved_settings.expiry_threshold_days,
    )

    async def close_resources() -> None:
        await change_feed.close()
        await telegram_client.close()
        await text_generator.close()

    return AppContainer(
        settings=resolved_settings,
        session_resolver=session_resolver,
        inventory_service=InventoryService(repository),
        live_collections=LiveCollections(repository=repository, feed=change_feed),
        recipe_service=RecipeService(generator=text_generator, repository=repository),
        notification_dispatcher=dispatcher,
        expiry_scanner=scanner,
        constraint=BatteryConstraint(resolved_settings.min_battery_percent),
        close_resources=close_resources,
    )
