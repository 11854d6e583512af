"""One-time migration of data kept in local storage before remote sync."""

import asyncio
import logging
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from liva.domain.errors import StoreError, StoreErrorKind
from liva.domain.logs import FoodLogDraft
from liva.domain.nutrition import NutritionValues, UserGoals
from liva.domain.recipes import RecipeDraft, RecipeItem
from liva.services.records import goals_to_patch, log_to_row, recipe_to_row
from liva.services.storage import LocalStorage
from liva.services.store import Collection, RemoteStore

LEGACY_GOALS_KEY = "nutritrack_goals"
LEGACY_LOGS_KEY = "nutritrack_logs"
LEGACY_RECIPES_KEY = "nutritrack_recipes"
LEGACY_PRODUCTS_KEY = "nutritrack_products"

LEGACY_DATA_KEYS = (LEGACY_GOALS_KEY, LEGACY_LOGS_KEY, LEGACY_RECIPES_KEY)
LEGACY_KEYS = (*LEGACY_DATA_KEYS, LEGACY_PRODUCTS_KEY)

_logger = logging.getLogger(__name__)


class LegacyMacros(BaseModel):
    """Macros as the browser client stored them."""

    model_config = ConfigDict(extra="ignore")

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def to_values(self) -> NutritionValues:
        return NutritionValues(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
        )


class LegacyGoals(BaseModel):
    model_config = ConfigDict(extra="ignore")

    regular: LegacyMacros
    training: LegacyMacros

    def to_goals(self) -> UserGoals:
        return UserGoals(
            regular=self.regular.to_values(), training=self.training.to_values()
        )


class LegacyLog(LegacyMacros):
    id: str = ""
    name: str
    quantity: float = 1.0
    unit: str = ""
    is_recipe: bool = Field(default=False, alias="isRecipe")

    def to_draft(self) -> FoodLogDraft:
        return FoodLogDraft(
            name=self.name,
            quantity=self.quantity,
            unit=self.unit,
            macros=self.to_values(),
            is_recipe=self.is_recipe,
        )

    def to_item(self) -> RecipeItem:
        return RecipeItem(
            id=self.id,
            name=self.name,
            quantity=self.quantity,
            unit=self.unit,
            macros=self.to_values(),
            is_recipe=self.is_recipe,
        )


class LegacyRecipe(LegacyMacros):
    name: str
    items: list[LegacyLog] = Field(default_factory=list)

    def to_draft(self) -> RecipeDraft:
        return RecipeDraft(
            name=self.name,
            items=[item.to_item() for item in self.items],
            macros=self.to_values(),
        )


@dataclass
class LegacyMigrator:
    """Moves legacy goals, logs and recipes into the remote store.

    Local keys are cleared only after every item was stored. A failed run
    leaves local data untouched so the next launch can try again; items
    inserted before the failure are inserted again on that retry.
    """

    storage: LocalStorage
    store: RemoteStore
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def has_legacy_data(self) -> bool:
        """Return True when any legacy data key is present."""
        try:
            return any(self.storage.get_item(key) for key in LEGACY_DATA_KEYS)
        except (OSError, ValueError):
            _logger.warning("Local storage unreadable, skipping legacy migration")
            return False

    async def migrate(self, device_id: str) -> bool:
        """Run the migration; return False if anything failed."""
        async with self._lock:
            try:
                await self._migrate_goals(device_id)
                await self._migrate_logs(device_id)
                await self._migrate_recipes(device_id)
            except (StoreError, ValidationError, OSError, ValueError) as exc:
                _logger.warning("Legacy migration failed, will retry later: %s", exc)
                return False

            for key in LEGACY_KEYS:
                self.storage.remove_item(key)
            _logger.info("Legacy local data migrated for device %s", device_id)
            return True

    async def _migrate_goals(self, device_id: str) -> None:
        raw = self.storage.get_item(LEGACY_GOALS_KEY)
        if not raw:
            return
        patch = goals_to_patch(LegacyGoals.model_validate_json(raw).to_goals())
        try:
            await self.store.update(Collection.DEVICES, device_id, patch)
        except StoreError as exc:
            if exc.kind is not StoreErrorKind.NOT_FOUND:
                raise
            # Migration runs before the first sync, so the device may not exist yet.
            await self.store.insert(
                Collection.DEVICES, {"device_id": device_id, **patch}
            )

    async def _migrate_logs(self, device_id: str) -> None:
        raw = self.storage.get_item(LEGACY_LOGS_KEY)
        if not raw:
            return
        for log in _LOGS_ADAPTER.validate_json(raw):
            await self.store.insert(
                Collection.FOOD_ENTRIES, log_to_row(device_id, log.to_draft())
            )

    async def _migrate_recipes(self, device_id: str) -> None:
        raw = self.storage.get_item(LEGACY_RECIPES_KEY)
        if not raw:
            return
        for recipe in _RECIPES_ADAPTER.validate_json(raw):
            await self.store.insert(
                Collection.RECIPES, recipe_to_row(device_id, recipe.to_draft())
            )


_LOGS_ADAPTER = TypeAdapter(list[LegacyLog])
_RECIPES_ADAPTER = TypeAdapter(list[LegacyRecipe])
