"""Models for predictor results."""

from pydantic import BaseModel, Field

from nutrition_ledger.domain.meals import MealEstimate


class NutritionPrediction(BaseModel):
    """Structured output returned by the photo predictor."""

    calories: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    description: str | None = None

    def to_estimate(self) -> MealEstimate:
        return MealEstimate(
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )
