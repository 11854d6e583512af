"""Dependency container wiring for the client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import acreate_client

from liva.adapters.json_file_storage import JsonFileStorage
from liva.adapters.openai_estimation_client import OpenAIEstimationClient
from liva.adapters.supabase_store import SupabaseRemoteStore
from liva.app_logging import configure_logging
from liva.config import Settings
from liva.services.devices import DeviceSyncService
from liva.services.estimation import EstimationService
from liva.services.identity import DeviceIdentityService
from liva.services.logs import FoodLogService
from liva.services.migration import LegacyMigrator
from liva.services.products import ProductLibraryService
from liva.services.recipes import RecipeService
from liva.services.session import AppSession
from liva.services.storage import LocalStorage
from liva.services.store import RemoteStore


@dataclass
class AppContainer:
    """Holds client-wide dependencies."""

    settings: Settings
    storage: LocalStorage
    store: RemoteStore
    estimation_service: EstimationService
    session: AppSession
    close_resources: Callable[[], Awaitable[None]]


async def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    configure_logging()
    resolved_settings = settings or Settings()
    supabase_client = await acreate_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    store = SupabaseRemoteStore(supabase_client)
    storage = JsonFileStorage.create(resolved_settings.local_storage_path)

    openai_client = (
        OpenAIEstimationClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    estimation_service = EstimationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    device_sync = DeviceSyncService(store)
    session = AppSession(
        identity=DeviceIdentityService(storage),
        migrator=LegacyMigrator(storage=storage, store=store),
        device_sync=device_sync,
        log_service=FoodLogService(store),
        recipe_service=RecipeService(store),
        product_service=ProductLibraryService(store),
        estimation_service=estimation_service,
        tz=resolved_settings.resolve_timezone(),
    )

    async def close_resources() -> None:
        await session.wait_for_background_tasks()
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        store=store,
        estimation_service=estimation_service,
        session=session,
        close_resources=close_resources,
    )
