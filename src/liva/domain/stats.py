"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyCalories:
    """Calories logged on one calendar day."""

    day: date
    label: str
    calories: float
