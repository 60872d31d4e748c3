"""Pydantic models for API request payloads."""

from pydantic import BaseModel, Field

from nutrition_ledger.domain.meals import MealEstimate
from nutrition_ledger.domain.profile import Goal, Profile


class ProfileRequest(BaseModel):
    """Profile form submission; missing values are rejected by the ledger."""

    name: str | None = None
    age: float | None = None
    weight: float | None = None
    height: float | None = None
    activity_multiplier: float = Field(default=1.2, gt=0)
    goal: Goal = Goal.MAINTAIN

    def to_profile(self) -> Profile:
        return Profile(
            age=self.age,
            weight_kg=self.weight,
            height_cm=self.height,
            activity_multiplier=self.activity_multiplier,
            goal=self.goal,
            name=self.name,
        )


class MealRequest(BaseModel):
    """Meal estimate submitted directly instead of through a photo."""

    calories: float
    protein: float
    fat: float
    carbs: float
    meal_type: str | None = None

    def to_estimate(self) -> MealEstimate:
        return MealEstimate(
            calories=self.calories,
            protein_g=self.protein,
            fat_g=self.fat,
            carbs_g=self.carbs,
        )
