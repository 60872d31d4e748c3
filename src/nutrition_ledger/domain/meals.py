"""Domain models for logged meals."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class MealType(Enum):
    """Meal category a logged meal is attributed to.

    Declaration order is the canonical bucket order used for tie-breaks.
    """

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | MealType | None") -> "MealType":
        """Return the matching meal type, falling back to OTHER."""
        if isinstance(value, MealType):
            return value
        if not value:
            return cls.OTHER
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class MacroProfile:
    """Calories and macronutrient grams."""

    calories: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0

    def plus(self, other: "MacroProfile") -> "MacroProfile":
        """Return a copy with the other profile's values added."""
        return replace(
            self,
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            fat_g=self.fat_g + other.fat_g,
            carbs_g=self.carbs_g + other.carbs_g,
        )


@dataclass(frozen=True)
class MealEstimate(MacroProfile):
    """Predictor output for a single meal photo."""


@dataclass(frozen=True)
class DailyTotals(MacroProfile):
    """Running totals for the current ledger day."""


@dataclass(frozen=True)
class MealRecord:
    """Immutable logged meal."""

    timestamp: datetime
    meal_type: MealType
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float

    @property
    def macros(self) -> MacroProfile:
        return MacroProfile(
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )
