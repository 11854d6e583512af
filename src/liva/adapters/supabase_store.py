"""Supabase implementation of the remote record store."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from liva.domain.errors import StoreError, StoreErrorKind
from liva.services.store import Collection, RemoteStore, key_column

# PostgREST codes for a missing table or column, plus Postgres undefined_table.
_SCHEMA_MISSING_CODES = {"PGRST204", "PGRST205", "42P01"}
_SCHEMA_MISSING_MARKERS = ("schema cache", "does not exist")

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SupabaseRemoteStore(RemoteStore):
    """Supabase-backed store for device-scoped collections."""

    client: AsyncClient

    async def insert(
        self, collection: Collection, record: dict[str, object]
    ) -> dict[str, object]:
        """Insert a record and return the stored row."""
        response = await self._run(
            f"insert into {collection}",
            lambda: self.client.table(collection).insert(record).execute(),
        )
        if not response.data:
            raise StoreError(
                StoreErrorKind.TRANSPORT, f"Insert into {collection} returned no row"
            )
        return response.data[0]

    async def select_by_device(
        self,
        collection: Collection,
        device_id: str,
        filters: dict[str, object] | None = None,
        columns: str = "*",
    ) -> list[dict[str, object]]:
        """Return rows owned by a device."""
        query = self.client.table(collection).select(columns).eq("device_id", device_id)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        response = await self._run(f"select from {collection}", query.execute)
        return list(response.data or [])

    async def update(
        self, collection: Collection, key: str, patch: dict[str, object]
    ) -> None:
        """Patch one record; raise NOT_FOUND when nothing matched."""
        response = await self._run(
            f"update {collection}",
            lambda: self.client.table(collection)
            .update(patch)
            .eq(key_column(collection), key)
            .execute(),
        )
        if not response.data:
            raise StoreError(
                StoreErrorKind.NOT_FOUND, f"No {collection} record matched {key}"
            )

    async def delete(self, collection: Collection, key: str) -> None:
        """Delete one record; raise NOT_FOUND when nothing matched."""
        response = await self._run(
            f"delete from {collection}",
            lambda: self.client.table(collection)
            .delete()
            .eq(key_column(collection), key)
            .execute(),
        )
        if not response.data:
            raise StoreError(
                StoreErrorKind.NOT_FOUND, f"No {collection} record matched {key}"
            )

    async def _run(self, action: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except (APIError, httpx.HTTPError) as exc:
            error = classify_error(exc)
            _logger.warning("Supabase %s failed (%s): %s", action, error.kind.value, exc)
            raise error from exc


def classify_error(exc: Exception) -> StoreError:
    """Map a raw Supabase or HTTP error onto a StoreError."""
    if isinstance(exc, APIError):
        code = str(exc.code or "")
        message = str(exc.message or exc)
        lowered = message.lower()
        if code in _SCHEMA_MISSING_CODES or any(
            marker in lowered for marker in _SCHEMA_MISSING_MARKERS
        ):
            return StoreError(StoreErrorKind.SCHEMA_MISSING, message)
        return StoreError(StoreErrorKind.TRANSPORT, _format_api_error(exc))
    return StoreError(StoreErrorKind.TRANSPORT, str(exc) or type(exc).__name__)


def _format_api_error(exc: APIError) -> str:
    message = str(exc.message or "Unknown error")
    if exc.details:
        message = f"{message} ({exc.details})"
    if exc.hint:
        message = f"{message} Hint: {exc.hint}"
    return message
