"""Meal photo prediction using an LLM vision model."""

import base64
from dataclasses import dataclass
from typing import Protocol

from nutrition_ledger.domain.meals import MealEstimate
from nutrition_ledger.domain.prediction import NutritionPrediction

_NUTRIENT = {"type": "number", "minimum": 0.0}

PREDICTION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": _NUTRIENT,
        "protein_g": _NUTRIENT,
        "fat_g": _NUTRIENT,
        "carbs_g": _NUTRIENT,
        "description": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": ["calories", "protein_g", "fat_g", "carbs_g", "description"],
    "additionalProperties": False,
}

PREDICTION_PROMPT = (
    "Estimate the nutrition of the whole meal in the photo. "
    "Return total calories (kcal) and grams of protein, fat and carbohydrates, "
    "plus a short description of what you see."
)


class PredictorClient(Protocol):
    """Interface for a vision model that returns structured JSON."""

    async def predict(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> NutritionPrediction:
        """Return the validated structured prediction."""


@dataclass
class PredictionService:
    """Turns an image into a meal estimate via the configured client."""

    client: PredictorClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def predict(self, image_bytes: bytes) -> MealEstimate:
        """Estimate calories and macros for a meal photo."""
        prediction = await self.client.predict(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=PREDICTION_SCHEMA,
            prompt=PREDICTION_PROMPT,
        )
        return prediction.to_estimate()


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{detect_mime_type(image_bytes)};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
