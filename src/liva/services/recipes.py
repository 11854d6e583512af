"""Recipe persistence service."""

import logging
from dataclasses import dataclass

from liva.domain.errors import StoreError
from liva.domain.recipes import Recipe, RecipeDraft
from liva.services.records import recipe_from_row, recipe_to_row
from liva.services.store import Collection, RemoteStore

_logger = logging.getLogger(__name__)


@dataclass
class RecipeService:
    """Reads and writes a device's recipes."""

    store: RemoteStore

    async def list_recipes(self, device_id: str) -> list[Recipe]:
        """Return all recipes for a device, or [] when the store is unreachable."""
        try:
            rows = await self.store.select_by_device(Collection.RECIPES, device_id)
            return [recipe_from_row(row) for row in rows]
        except StoreError as exc:
            if exc.is_schema_missing:
                raise
            _logger.warning("Fetching recipes failed: %s", exc.message)
            return []

    async def save_recipe(self, device_id: str, draft: RecipeDraft) -> Recipe:
        """Insert a recipe and return the stored version."""
        row = await self.store.insert(
            Collection.RECIPES, recipe_to_row(device_id, draft)
        )
        return recipe_from_row(row)

    async def delete_recipe(self, recipe_id: str) -> None:
        """Delete a recipe; its source log entries are untouched."""
        await self.store.delete(Collection.RECIPES, recipe_id)
