"""Tests for the Supabase remote store."""

import asyncio
from dataclasses import dataclass, field

import httpx
import pytest
from postgrest.exceptions import APIError

from liva.adapters.supabase_store import SupabaseRemoteStore, classify_error
from liva.domain.errors import StoreError, StoreErrorKind
from liva.services.store import Collection


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    error: Exception | None = None
    last_payload: object | None = None
    last_columns: str | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, columns: str = "*") -> "FakeTable":
        self._action = "select"
        self.last_columns = columns
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    async def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        queue = self.response_queue[self._action]
        data = queue.pop(0) if queue else []
        return FakeResponse(data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name)
        return self.tables[name]


def _api_error(message: str, code: str | None = None, **extra: str) -> APIError:
    return APIError(
        {
            "message": message,
            "code": code,
            "hint": extra.get("hint"),
            "details": extra.get("details"),
        }
    )


def test_insert_returns_stored_row() -> None:
    client = FakeSupabaseClient()
    client.table("food_entries").queue(
        "insert", [{"id": "log-1", "name": "Appel", "created_at": "2024-05-01T10:00:00+00:00"}]
    )
    store = SupabaseRemoteStore(client)  # type: ignore[arg-type]

    row = asyncio.run(
        store.insert(Collection.FOOD_ENTRIES, {"device_id": "dev-1", "name": "Appel"})
    )

    assert row["id"] == "log-1"
    assert client.tables["food_entries"].last_payload == {
        "device_id": "dev-1",
        "name": "Appel",
    }


def test_insert_without_returned_row_is_transport_error() -> None:
    store = SupabaseRemoteStore(FakeSupabaseClient())  # type: ignore[arg-type]

    with pytest.raises(StoreError) as excinfo:
        asyncio.run(store.insert(Collection.RECIPES, {"device_id": "dev-1"}))

    assert excinfo.value.kind is StoreErrorKind.TRANSPORT


def test_select_filters_by_device_and_extra_columns() -> None:
    client = FakeSupabaseClient()
    client.table("saved_products").queue("select", [{"name": "Appel"}])
    store = SupabaseRemoteStore(client)  # type: ignore[arg-type]

    rows = asyncio.run(
        store.select_by_device(
            Collection.SAVED_PRODUCTS, "dev-1", filters={"name": "Appel"}, columns="name"
        )
    )

    table = client.tables["saved_products"]
    assert rows == [{"name": "Appel"}]
    assert table.last_columns == "name"
    assert table.last_filters == [("device_id", "dev-1"), ("name", "Appel")]


def test_update_device_matches_on_device_id() -> None:
    client = FakeSupabaseClient()
    client.table("devices").queue("update", [{"device_id": "dev-1"}])
    store = SupabaseRemoteStore(client)  # type: ignore[arg-type]

    asyncio.run(
        store.update(Collection.DEVICES, "dev-1", {"regular_day_goals": {"calories": 1}})
    )

    assert client.tables["devices"].last_filters == [("device_id", "dev-1")]


def test_delete_matches_on_id_and_reports_missing_rows() -> None:
    client = FakeSupabaseClient()
    client.table("food_entries").queue("delete", [{"id": "log-1"}])
    store = SupabaseRemoteStore(client)  # type: ignore[arg-type]

    asyncio.run(store.delete(Collection.FOOD_ENTRIES, "log-1"))
    with pytest.raises(StoreError) as excinfo:
        asyncio.run(store.delete(Collection.FOOD_ENTRIES, "log-2"))

    assert client.tables["food_entries"].last_filters == [
        ("id", "log-1"),
        ("id", "log-2"),
    ]
    assert excinfo.value.kind is StoreErrorKind.NOT_FOUND


def test_missing_table_is_classified_as_schema_missing() -> None:
    client = FakeSupabaseClient()
    client.table("devices").error = _api_error(
        "Could not find the table 'public.devices' in the schema cache", "PGRST205"
    )
    store = SupabaseRemoteStore(client)  # type: ignore[arg-type]

    with pytest.raises(StoreError) as excinfo:
        asyncio.run(store.select_by_device(Collection.DEVICES, "dev-1"))

    assert excinfo.value.is_schema_missing


def test_network_failure_is_classified_as_transport() -> None:
    client = FakeSupabaseClient()
    client.table("recipes").error = httpx.ConnectError("connection refused")
    store = SupabaseRemoteStore(client)  # type: ignore[arg-type]

    with pytest.raises(StoreError) as excinfo:
        asyncio.run(store.select_by_device(Collection.RECIPES, "dev-1"))

    assert excinfo.value.kind is StoreErrorKind.TRANSPORT
    assert "connection refused" in excinfo.value.message


def test_classify_error_recognizes_undefined_table_by_code_or_message() -> None:
    by_code = classify_error(_api_error("relation missing", "42P01"))
    by_message = classify_error(_api_error('relation "recipes" does not exist'))

    assert by_code.kind is StoreErrorKind.SCHEMA_MISSING
    assert by_message.kind is StoreErrorKind.SCHEMA_MISSING


def test_classify_error_keeps_details_and_hint_for_other_errors() -> None:
    error = classify_error(
        _api_error("permission denied", "42501", details="rls", hint="check policies")
    )

    assert error.kind is StoreErrorKind.TRANSPORT
    assert error.message == "permission denied (rls) Hint: check policies"
