"""Domain models for recipes."""

from dataclasses import dataclass

from liva.domain.nutrition import NutritionValues


@dataclass(frozen=True)
class RecipeItem:
    """Snapshot of a logged entry that went into a recipe."""

    id: str
    name: str
    quantity: float
    unit: str
    macros: NutritionValues
    is_recipe: bool = False


@dataclass(frozen=True)
class RecipeDraft:
    """Recipe before the store assigned an id."""

    name: str
    items: list[RecipeItem]
    macros: NutritionValues


@dataclass(frozen=True)
class Recipe:
    """A stored recipe."""

    id: str
    name: str
    items: list[RecipeItem]
    macros: NutritionValues
