"""Domain models for statistics."""

from dataclasses import dataclass

from nutrition_ledger.domain.meals import MealType


@dataclass(frozen=True)
class Summary:
    """All-time statistics over the retained meal history."""

    total_meals: int
    total_calories: float
    avg_calories_per_meal: float | None
    most_caloric_meal_type: MealType | None

    @property
    def has_data(self) -> bool:
        return self.total_meals > 0
