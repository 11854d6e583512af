"""Daily totals and calorie series over food logs.

Days are local calendar days: an entry belongs to the day whose midnight is
the latest one at or before its timestamp, so an entry logged exactly at
midnight counts towards the day that starts then.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo

from liva.domain.logs import FoodLogEntry
from liva.domain.nutrition import NutritionValues
from liva.domain.recipes import RecipeDraft, RecipeItem
from liva.domain.stats import DailyCalories

WEEKDAY_LABELS = ("ma", "di", "wo", "do", "vr", "za", "zo")
SERIES_DAYS = 7


def start_of_day(instant: datetime, tz: tzinfo | None = None) -> datetime:
    """Truncate an instant to local midnight."""
    local = instant.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def logs_for_day(
    logs: Iterable[FoodLogEntry], day_start: datetime, tz: tzinfo | None = None
) -> list[FoodLogEntry]:
    """Return the entries of one local day, newest first."""
    day = _local_day(day_start, tz)
    selected = [log for log in logs if _local_day(log.timestamp, tz) == day]
    return sorted(selected, key=lambda log: log.timestamp, reverse=True)


def totals_for_day(
    logs: Iterable[FoodLogEntry], day_start: datetime, tz: tzinfo | None = None
) -> NutritionValues:
    """Sum the macros of entries logged on the given local day."""
    day = _local_day(day_start, tz)
    total = NutritionValues.zero()
    for log in logs:
        if _local_day(log.timestamp, tz) != day:
            continue
        total = total.plus(log.macros)
    return total


def last_7_days_series(
    logs: Iterable[FoodLogEntry], today: datetime, tz: tzinfo | None = None
) -> list[DailyCalories]:
    """Return calories per day for the week ending today, oldest first."""
    calories_by_day: dict[date, float] = {}
    for log in logs:
        day = _local_day(log.timestamp, tz)
        calories_by_day[day] = calories_by_day.get(day, 0.0) + log.macros.calories

    last_day = _local_day(today, tz)
    series = []
    for offset in range(SERIES_DAYS - 1, -1, -1):
        day = last_day - timedelta(days=offset)
        series.append(
            DailyCalories(
                day=day,
                label=WEEKDAY_LABELS[day.weekday()],
                calories=calories_by_day.get(day, 0.0),
            )
        )
    return series


def remaining_allowance(
    goals: NutritionValues, totals: NutritionValues
) -> NutritionValues:
    """Return what is left of each goal; negative values mean overage."""
    return goals.minus(totals)


def build_recipe(name: str, logs: Iterable[FoodLogEntry]) -> RecipeDraft:
    """Combine selected entries into a recipe holding copies of them."""
    items: list[RecipeItem] = []
    total = NutritionValues.zero()
    for log in logs:
        items.append(
            RecipeItem(
                id=log.id,
                name=log.name,
                quantity=log.quantity,
                unit=log.unit,
                macros=log.macros,
                is_recipe=log.is_recipe,
            )
        )
        total = total.plus(log.macros)
    return RecipeDraft(name=name, items=items, macros=total)


def _local_day(instant: datetime, tz: tzinfo | None) -> date:
    return instant.astimezone(tz).date()
