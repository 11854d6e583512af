"""Library of product names a device has logged before."""

import logging
from dataclasses import dataclass

from liva.domain.errors import StoreError
from liva.services.store import Collection, RemoteStore

_logger = logging.getLogger(__name__)


@dataclass
class ProductLibraryService:
    """Remembers product names for autocomplete."""

    store: RemoteStore

    async def list_products(self, device_id: str) -> list[str]:
        """Return distinct product names in first-seen order."""
        try:
            rows = await self.store.select_by_device(
                Collection.SAVED_PRODUCTS, device_id, columns="name"
            )
        except StoreError as exc:
            _logger.warning("Fetching products failed: %s", exc.message)
            return []
        names = [str(row["name"]) for row in rows if row.get("name")]
        return list(dict.fromkeys(names))

    async def remember(self, device_id: str, names: list[str]) -> list[str]:
        """Store names not seen before and return the ones inserted."""
        existing = set(await self.list_products(device_id))
        new_names = [
            name for name in dict.fromkeys(names) if name and name not in existing
        ]
        for name in new_names:
            await self.store.insert(
                Collection.SAVED_PRODUCTS, {"device_id": device_id, "name": name}
            )
        return new_names


def suggest_products(products: list[str], query: str, limit: int = 5) -> list[str]:
    """Return products containing the query, case-insensitively."""
    if len(query) <= 1:
        return []
    needle = query.lower()
    return [name for name in products if needle in name.lower()][:limit]
