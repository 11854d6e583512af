"""Food log persistence service."""

import logging
from dataclasses import dataclass

from liva.domain.errors import StoreError
from liva.domain.logs import FoodLogDraft, FoodLogEntry
from liva.services.records import log_from_row, log_to_row
from liva.services.store import Collection, RemoteStore

_logger = logging.getLogger(__name__)


@dataclass
class FoodLogService:
    """Reads and writes a device's food entries."""

    store: RemoteStore

    async def list_logs(self, device_id: str) -> list[FoodLogEntry]:
        """Return all entries for a device, or [] when the store is unreachable.

        Malformed rows count as a failed read. A missing table is not
        absorbed; it propagates so the session can enter setup-required mode.
        """
        try:
            rows = await self.store.select_by_device(Collection.FOOD_ENTRIES, device_id)
            return [log_from_row(row) for row in rows]
        except StoreError as exc:
            if exc.is_schema_missing:
                raise
            _logger.warning("Fetching logs failed: %s", exc.message)
            return []

    async def add_log(self, device_id: str, draft: FoodLogDraft) -> FoodLogEntry:
        """Insert an entry and return it with the store-assigned timestamp."""
        row = await self.store.insert(
            Collection.FOOD_ENTRIES, log_to_row(device_id, draft)
        )
        return log_from_row(row)

    async def delete_log(self, log_id: str) -> None:
        """Delete an entry by id."""
        await self.store.delete(Collection.FOOD_ENTRIES, log_id)
