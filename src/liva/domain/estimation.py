"""Models for AI nutrition estimates."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from liva.domain.nutrition import NutritionValues


class NutritionEstimate(BaseModel):
    """Structured output of a nutrition estimate."""

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    reasoning: str

    def to_values(self) -> NutritionValues:
        """Return the macros without the explanation."""
        return NutritionValues(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
        )


class EstimationFailure(Enum):
    """Why an estimate is unavailable."""

    MISSING_CREDENTIALS = "missing_credentials"
    FAILED = "failed"


@dataclass(frozen=True)
class EstimationOutcome:
    """Estimate or the reason the user has to enter values manually."""

    estimate: NutritionEstimate | None = None
    failure: EstimationFailure | None = None

    @property
    def manual_entry_required(self) -> bool:
        """Return True when the form should fall back to manual input."""
        return self.estimate is None
