"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from liva.config import Settings
from liva.domain.errors import StoreError, StoreErrorKind
from liva.services.devices import DeviceSyncService
from liva.services.estimation import EstimationClient, EstimationService
from liva.services.identity import DeviceIdentityService
from liva.services.logs import FoodLogService
from liva.services.migration import LegacyMigrator
from liva.services.products import ProductLibraryService
from liva.services.recipes import RecipeService
from liva.services.session import AppSession
from liva.services.storage import LocalStorage
from liva.services.store import Collection, RemoteStore, key_column


@dataclass
class InMemoryRemoteStore(RemoteStore):
    """In-memory remote store with injectable failures."""

    rows: dict[Collection, list[dict[str, object]]] = field(
        default_factory=lambda: {collection: [] for collection in Collection}
    )
    calls: list[tuple[str, Collection]] = field(default_factory=list)
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))
    _failures: dict[tuple[str, Collection], list[object]] = field(
        default_factory=dict
    )

    def fail(
        self,
        action: str,
        collection: Collection,
        kind: StoreErrorKind = StoreErrorKind.TRANSPORT,
        after: int = 0,
    ) -> None:
        """Make an action fail, optionally after some successful calls."""
        self._failures[(action, collection)] = [after, StoreError(kind, "injected")]

    def clear_failures(self) -> None:
        self._failures.clear()

    async def insert(
        self, collection: Collection, record: dict[str, object]
    ) -> dict[str, object]:
        self._check("insert", collection)
        row = {
            "id": str(uuid4()),
            "created_at": self.clock().isoformat(),
            **record,
        }
        self.rows[collection].append(row)
        return dict(row)

    async def select_by_device(
        self,
        collection: Collection,
        device_id: str,
        filters: dict[str, object] | None = None,
        columns: str = "*",
    ) -> list[dict[str, object]]:
        self._check("select", collection)
        return [
            dict(row)
            for row in self.rows[collection]
            if row.get("device_id") == device_id
            and all(row.get(column) == value for column, value in (filters or {}).items())
        ]

    async def update(
        self, collection: Collection, key: str, patch: dict[str, object]
    ) -> None:
        self._check("update", collection)
        matched = self._matching(collection, key)
        if not matched:
            raise StoreError(StoreErrorKind.NOT_FOUND, "no match")
        for row in matched:
            row.update(patch)

    async def delete(self, collection: Collection, key: str) -> None:
        self._check("delete", collection)
        matched = self._matching(collection, key)
        if not matched:
            raise StoreError(StoreErrorKind.NOT_FOUND, "no match")
        self.rows[collection] = [
            row for row in self.rows[collection] if row not in matched
        ]

    def _matching(self, collection: Collection, key: str) -> list[dict[str, object]]:
        column = key_column(collection)
        return [row for row in self.rows[collection] if row.get(column) == key]

    def _check(self, action: str, collection: Collection) -> None:
        self.calls.append((action, collection))
        failure = self._failures.get((action, collection))
        if failure is None:
            return
        if failure[0] > 0:
            failure[0] -= 1
            return
        raise failure[1]


@dataclass
class InMemoryLocalStorage(LocalStorage):
    """Dict-backed local storage; can simulate an unavailable disk."""

    items: dict[str, str] = field(default_factory=dict)
    broken: bool = False

    def get_item(self, key: str) -> str | None:
        if self.broken:
            raise OSError("storage unavailable")
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.broken:
            raise OSError("storage unavailable")
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        if self.broken:
            raise OSError("storage unavailable")
        self.items.pop(key, None)


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake estimation client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "calories": 80,
            "protein": 0.5,
            "carbs": 20,
            "fat": 0.3,
            "reasoning": "Een middelgrote appel bevat ongeveer 80 kcal.",
        }
    )
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)
    schema_names: list[str] = field(default_factory=list)

    async def estimate(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        self.schema_names.append(schema_name)
        if self.error is not None:
            raise self.error
        return self.payload


def build_session(
    store: InMemoryRemoteStore,
    storage: InMemoryLocalStorage,
    estimation_client: EstimationClient | None = None,
    tz=UTC,
) -> AppSession:
    """Wire a session against in-memory collaborators."""
    return AppSession(
        identity=DeviceIdentityService(storage),
        migrator=LegacyMigrator(storage=storage, store=store),
        device_sync=DeviceSyncService(store),
        log_service=FoodLogService(store),
        recipe_service=RecipeService(store),
        product_service=ProductLibraryService(store),
        estimation_service=EstimationService(
            client=estimation_client,
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
        ),
        tz=tz,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_key="header.payload.signature",
        openai_api_key="openai-key",
        local_storage_path=str(tmp_path / "storage.json"),
    )


@pytest.fixture
def store() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest.fixture
def storage() -> InMemoryLocalStorage:
    return InMemoryLocalStorage()
