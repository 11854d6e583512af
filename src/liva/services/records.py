"""Conversion between remote rows and domain models."""

from datetime import UTC, datetime

from liva.domain.devices import DeviceRecord
from liva.domain.errors import StoreError, StoreErrorKind
from liva.domain.logs import FoodLogDraft, FoodLogEntry
from liva.domain.nutrition import NutritionValues, UserGoals
from liva.domain.recipes import Recipe, RecipeDraft, RecipeItem

_MALFORMED = (KeyError, ValueError, TypeError)


def log_to_row(device_id: str, draft: FoodLogDraft) -> dict[str, object]:
    """Build a food_entries row; id and created_at come from the store."""
    return {
        "device_id": device_id,
        "name": draft.name,
        "quantity": draft.quantity,
        "unit": draft.unit,
        "calories": draft.macros.calories,
        "protein": draft.macros.protein,
        "carbs": draft.macros.carbs,
        "fat": draft.macros.fat,
        "is_recipe": draft.is_recipe,
        "date": datetime.now(tz=UTC).date().isoformat(),
    }


def log_from_row(row: dict[str, object]) -> FoodLogEntry:
    """Parse a food_entries row; raise StoreError when it is malformed."""
    try:
        return FoodLogEntry(
            id=str(row["id"]),
            name=str(row.get("name", "")),
            quantity=_to_float(row.get("quantity")),
            unit=str(row.get("unit") or ""),
            macros=values_from_mapping(row),
            timestamp=_parse_timestamp(row.get("created_at")),
            is_recipe=bool(row.get("is_recipe") or False),
        )
    except _MALFORMED as exc:
        raise StoreError(
            StoreErrorKind.TRANSPORT, f"Malformed food_entries row: {exc!r}"
        ) from exc


def recipe_to_row(device_id: str, draft: RecipeDraft) -> dict[str, object]:
    """Build a recipes row with the items embedded as JSON."""
    return {
        "device_id": device_id,
        "name": draft.name,
        "ingredients": [item_to_json(item) for item in draft.items],
        "total_calories": draft.macros.calories,
        "protein": draft.macros.protein,
        "carbs": draft.macros.carbs,
        "fat": draft.macros.fat,
    }


def recipe_from_row(row: dict[str, object]) -> Recipe:
    """Parse a recipes row; raise StoreError when it is malformed."""
    try:
        ingredients = row.get("ingredients") or []
        return Recipe(
            id=str(row["id"]),
            name=str(row.get("name", "")),
            items=[
                item_from_json(item)
                for item in ingredients
                if isinstance(item, dict)
            ],
            macros=NutritionValues(
                calories=_to_float(row.get("total_calories")),
                protein=_to_float(row.get("protein")),
                carbs=_to_float(row.get("carbs")),
                fat=_to_float(row.get("fat")),
            ),
        )
    except _MALFORMED as exc:
        raise StoreError(
            StoreErrorKind.TRANSPORT, f"Malformed recipes row: {exc!r}"
        ) from exc


def item_to_json(item: RecipeItem) -> dict[str, object]:
    """Serialize a recipe item the way the web client stored it."""
    return {
        "id": item.id,
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "calories": item.macros.calories,
        "protein": item.macros.protein,
        "carbs": item.macros.carbs,
        "fat": item.macros.fat,
        "isRecipe": item.is_recipe,
    }


def item_from_json(data: dict[str, object]) -> RecipeItem:
    """Parse an embedded recipe item."""
    return RecipeItem(
        id=str(data.get("id", "")),
        name=str(data.get("name", "")),
        quantity=_to_float(data.get("quantity")),
        unit=str(data.get("unit") or ""),
        macros=values_from_mapping(data),
        is_recipe=bool(data.get("isRecipe") or data.get("is_recipe") or False),
    )


def goals_to_patch(goals: UserGoals) -> dict[str, object]:
    """Build the devices patch that stores both goal profiles."""
    return {
        "regular_day_goals": values_to_json(goals.regular),
        "training_day_goals": values_to_json(goals.training),
    }


def device_from_row(row: dict[str, object]) -> DeviceRecord:
    """Parse a devices row; goals exist only when regular goals are set."""
    regular = row.get("regular_day_goals")
    training = row.get("training_day_goals")
    goals = None
    if isinstance(regular, dict) and regular:
        regular_values = values_from_mapping(regular)
        goals = UserGoals(
            regular=regular_values,
            training=(
                values_from_mapping(training)
                if isinstance(training, dict) and training
                else regular_values
            ),
        )
    return DeviceRecord(device_id=str(row.get("device_id", "")), goals=goals)


def values_to_json(values: NutritionValues) -> dict[str, float]:
    return {
        "calories": values.calories,
        "protein": values.protein,
        "carbs": values.carbs,
        "fat": values.fat,
    }


def values_from_mapping(data: dict[str, object]) -> NutritionValues:
    return NutritionValues(
        calories=_to_float(data.get("calories")),
        protein=_to_float(data.get("protein")),
        carbs=_to_float(data.get("carbs")),
        fat=_to_float(data.get("fat")),
    )


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise ValueError(f"created_at missing or invalid: {value!r}")


def _to_float(value: object) -> float:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
