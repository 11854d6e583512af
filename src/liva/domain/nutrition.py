"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionValues:
    """Calories and macronutrients tracked as one unit."""

    calories: float
    protein: float
    carbs: float
    fat: float

    @classmethod
    def zero(cls) -> "NutritionValues":
        """Return an all-zero profile."""
        return cls(calories=0.0, protein=0.0, carbs=0.0, fat=0.0)

    def plus(self, other: "NutritionValues") -> "NutritionValues":
        """Return the component-wise sum."""
        return NutritionValues(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
        )

    def minus(self, other: "NutritionValues") -> "NutritionValues":
        """Return the component-wise difference."""
        return NutritionValues(
            calories=self.calories - other.calories,
            protein=self.protein - other.protein,
            carbs=self.carbs - other.carbs,
            fat=self.fat - other.fat,
        )


@dataclass(frozen=True)
class UserGoals:
    """Daily targets for regular and training days."""

    regular: NutritionValues
    training: NutritionValues

    def active(self, is_training_day: bool) -> NutritionValues:
        """Return the profile that applies today."""
        return self.training if is_training_day else self.regular


def default_goals() -> UserGoals:
    """Goals offered to a first-time user."""
    regular = NutritionValues(calories=2000, protein=150, carbs=250, fat=65)
    return UserGoals(
        regular=regular,
        training=NutritionValues(calories=2300, protein=150, carbs=300, fat=65),
    )
