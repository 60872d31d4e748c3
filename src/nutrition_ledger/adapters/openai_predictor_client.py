"""OpenAI Responses API client for meal photo prediction."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_ledger.domain.prediction import NutritionPrediction
from nutrition_ledger.services.prediction import PredictorClient


@dataclass
class OpenAIPredictorClient(PredictorClient):
    """Predictor client backed by the OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIPredictorClient":
        """Create an OpenAI predictor client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Request a structured nutrition estimate for one image.

        The structured output is validated against ``NutritionPrediction``,
        so negative or missing nutrients raise ``ValidationError`` here.
        """
        response = await self.client.responses.create(
            model=model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            ],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "meal_nutrition",
                    "strict": True,
                    "schema": schema,
                }
            },
            store=store,
            **_reasoning_options(reasoning_effort),
        )
        if not response.output_text:
            raise RuntimeError("OpenAI returned an empty prediction")
        return NutritionPrediction.model_validate_json(response.output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()


def _reasoning_options(reasoning_effort: str | None) -> dict[str, object]:
    if not reasoning_effort:
        return {}
    return {"reasoning": {"effort": reasoning_effort}}
