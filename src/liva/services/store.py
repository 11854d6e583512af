"""Remote record store interface."""

from enum import StrEnum
from typing import Protocol


class Collection(StrEnum):
    """Remote collections, all scoped by device id."""

    DEVICES = "devices"
    FOOD_ENTRIES = "food_entries"
    RECIPES = "recipes"
    SAVED_PRODUCTS = "saved_products"


def key_column(collection: Collection) -> str:
    """Return the column that identifies a single record."""
    return "device_id" if collection is Collection.DEVICES else "id"


class RemoteStore(Protocol):
    """Generic CRUD over device-scoped collections.

    Every method raises ``StoreError`` on failure, with the backend error
    already classified into a ``StoreErrorKind``.
    """

    async def insert(
        self, collection: Collection, record: dict[str, object]
    ) -> dict[str, object]:
        """Insert a record and return the stored row."""

    async def select_by_device(
        self,
        collection: Collection,
        device_id: str,
        filters: dict[str, object] | None = None,
        columns: str = "*",
    ) -> list[dict[str, object]]:
        """Return rows owned by a device, optionally filtered by equality."""

    async def update(
        self, collection: Collection, key: str, patch: dict[str, object]
    ) -> None:
        """Apply a patch to the record identified by its key column."""

    async def delete(self, collection: Collection, key: str) -> None:
        """Delete the record identified by its key column."""
