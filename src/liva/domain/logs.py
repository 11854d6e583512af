"""Domain models for food logging."""

from dataclasses import dataclass
from datetime import datetime

from liva.domain.nutrition import NutritionValues

RECIPE_UNIT = "portie"


@dataclass(frozen=True)
class FoodLogDraft:
    """A food entry as submitted, before the store accepted it."""

    name: str
    quantity: float
    unit: str
    macros: NutritionValues
    is_recipe: bool = False


@dataclass(frozen=True)
class FoodLogEntry:
    """A stored food entry with its store-assigned id and timestamp."""

    id: str
    name: str
    quantity: float
    unit: str
    macros: NutritionValues
    timestamp: datetime
    is_recipe: bool = False
