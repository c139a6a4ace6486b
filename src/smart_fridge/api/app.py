"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from smart_fridge.api.models import (
    ItemPayload,
    NamePayload,
    QuantityPayload,
    RecommendPayload,
    SessionPayload,
)
from smart_fridge.app_logging import configure_logging
from smart_fridge.containers import AppContainer
from smart_fridge.domain.inventory import Category, to_document
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.collections import RemoteStoreError
from smart_fridge.services.live import InventoryView


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    async def open_view(app: FastAPI, scope: UserScope) -> None:
        view = InventoryView(live=container.live_collections, scope=scope)
        try:
            await view.open()
            await view.wait_idle()
        except Exception:
            logger.exception("Failed to open live view for %s", scope.namespace)
            return
        app.state.view = view

    async def close_view(app: FastAPI) -> None:
        view: InventoryView | None = app.state.view
        app.state.view = None
        if view is not None:
            await view.close()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scope = container.session_resolver.resolve()
        if scope is not None:
            await open_view(app, scope)
        yield
        await close_view(app)
        await container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.view = None

    @app.exception_handler(RemoteStoreError)
    async def remote_store_error(
        request: Request, exc: RemoteStoreError
    ) -> JSONResponse:
        logger.warning("Remote store error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)}
        )

    def require_scope() -> UserScope:
        scope = container.session_resolver.resolve()
        if scope is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        return scope

    def live_view(request: Request, scope: UserScope) -> InventoryView | None:
        view: InventoryView | None = request.app.state.view
        if view is None or view.scope.user_id != scope.user_id:
            return None
        return view

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/session")
    async def get_session() -> dict[str, object]:
        """Return the signed-in user, if any."""
        scope = container.session_resolver.resolve()
        if scope is None:
            return {"user": None}
        return {"user": {"id": scope.user_id, "label": scope.label}}

    @app.put("/session")
    async def login(payload: SessionPayload, request: Request) -> dict[str, object]:
        """Store the signed-in user and start live sync for them."""
        await close_view(request.app)
        scope = container.session_resolver.login(payload.id, payload.label)
        await open_view(request.app, scope)
        return {"user": {"id": scope.user_id, "label": scope.label}}

    @app.delete("/session")
    async def logout(request: Request) -> dict[str, str]:
        """Sign out and stop live sync."""
        await close_view(request.app)
        container.session_resolver.logout()
        return {"status": "ok"}

    @app.get("/items")
    async def list_items(request: Request) -> dict[str, object]:
        """Return items sorted by expiry date."""
        scope = require_scope()
        view = live_view(request, scope)
        if view is not None:
            items = view.items
        else:
            items = container.inventory_service.list_items(scope)
        return {
            "items": [to_document(item) for item in items],
            "live": view is not None,
            "degraded": bool(view and view.degraded),
        }

    @app.post("/items", status_code=status.HTTP_201_CREATED)
    async def create_item(payload: ItemPayload) -> dict[str, object]:
        """Create an item."""
        scope = require_scope()
        item = container.inventory_service.add_item(scope, payload.to_item())
        return to_document(item)

    @app.post("/items/bulk", status_code=status.HTTP_201_CREATED)
    async def bulk_create_items(payloads: list[ItemPayload]) -> dict[str, object]:
        """Create several items, e.g. from a scanned receipt."""
        scope = require_scope()
        saved = container.inventory_service.bulk_add(
            scope, [payload.to_item() for payload in payloads]
        )
        return {"items": [to_document(item) for item in saved]}

    @app.put("/items/{item_id}")
    async def replace_item(item_id: str, payload: ItemPayload) -> dict[str, object]:
        """Replace every field of an item."""
        scope = require_scope()
        item = container.inventory_service.update_item(
            scope, payload.to_item(item_id)
        )
        return to_document(item)

    @app.patch("/items/{item_id}/quantity")
    async def change_quantity(
        item_id: str, payload: QuantityPayload
    ) -> dict[str, object]:
        """Set the quantity of an item from user input."""
        scope = require_scope()
        current = next(
            (
                item
                for item in container.inventory_service.list_items(scope)
                if item.id == item_id
            ),
            None,
        )
        if current is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        item = container.inventory_service.change_quantity(
            scope, current, payload.quantity
        )
        return to_document(item)

    @app.delete("/items/{item_id}")
    async def delete_item(item_id: str) -> dict[str, str]:
        """Delete an item."""
        scope = require_scope()
        container.inventory_service.delete_item(scope, item_id)
        return {"status": "ok"}

    @app.get("/areas")
    async def list_areas(request: Request) -> dict[str, object]:
        """Return storage areas."""
        scope = require_scope()
        view = live_view(request, scope)
        if view is not None:
            areas = view.categories
        else:
            areas = container.inventory_service.list_categories(scope)
        return {"areas": [to_document(area) for area in areas]}

    @app.post("/areas", status_code=status.HTTP_201_CREATED)
    async def create_area(payload: NamePayload) -> dict[str, object]:
        """Create a storage area."""
        scope = require_scope()
        area = container.inventory_service.add_category(scope, payload.name)
        return to_document(area)

    @app.post("/areas/defaults")
    async def seed_areas() -> dict[str, object]:
        """Create the default storage areas for a new user."""
        scope = require_scope()
        created = container.inventory_service.seed_default_categories(scope)
        return {"areas": [to_document(area) for area in created]}

    @app.put("/areas/{area_id}")
    async def rename_area(area_id: str, payload: NamePayload) -> dict[str, object]:
        """Rename a storage area without touching items tagged with it."""
        scope = require_scope()
        area = container.inventory_service.rename_category(
            scope, Category(id=area_id), payload.name
        )
        return to_document(area)

    @app.delete("/areas/{area_id}")
    async def delete_area(area_id: str) -> dict[str, str]:
        """Delete a storage area."""
        scope = require_scope()
        container.inventory_service.delete_category(scope, area_id)
        return {"status": "ok"}

    @app.get("/recipes")
    async def list_recipes(request: Request) -> dict[str, object]:
        """Return saved recipes."""
        scope = require_scope()
        view = live_view(request, scope)
        if view is not None:
            recipes = view.recipes
        else:
            recipes = container.inventory_service.list_recipes(scope)
        return {"recipes": [to_document(recipe) for recipe in recipes]}

    @app.post("/recipes", status_code=status.HTTP_201_CREATED)
    async def create_recipe(payload: NamePayload) -> dict[str, object]:
        """Generate a recipe for a dish and save it."""
        scope = require_scope()
        recipe = await container.recipe_service.generate_full_recipe(
            scope, payload.name
        )
        return to_document(recipe)

    @app.post("/recipes/recommend")
    async def recommend_recipe(payload: RecommendPayload) -> dict[str, str]:
        """Suggest a dish from selected ingredients without saving it."""
        require_scope()
        content = await container.recipe_service.recommend_recipe(payload.ingredients)
        return {"content": content}

    @app.delete("/recipes/{recipe_id}")
    async def delete_recipe(recipe_id: str) -> dict[str, str]:
        """Delete a saved recipe."""
        scope = require_scope()
        container.inventory_service.delete_recipe(scope, recipe_id)
        return {"status": "ok"}

    @app.post("/scan")
    async def scan() -> dict[str, object]:
        """Run the expiry check once, outside the schedule."""
        report = await container.expiry_scanner.run()
        return {
            "outcome": report.outcome.value,
            "expiring": [item.name for item in report.expiring],
        }

    return app
