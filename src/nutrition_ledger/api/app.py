"""FastAPI application factory."""

import logging
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response

from nutrition_ledger.api.models import MealRequest, ProfileRequest
from nutrition_ledger.app_logging import configure_logging
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.advice import Tip
from nutrition_ledger.domain.meals import MacroProfile, MealEstimate, MealRecord
from nutrition_ledger.domain.profile import DailyTarget, Profile
from nutrition_ledger.domain.stats import Summary
from nutrition_ledger.services.export import meals_to_csv, meals_to_json
from nutrition_ledger.services.ledger import NutritionLedger
from nutrition_ledger.services.targets import InvalidProfileError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            ledger = app.state.container.ledger
            if await run_in_threadpool(ledger.check_idle_reminder):
                logger.info("Sent idle meal reminder")
        except Exception:
            logger.exception("Idle meal check failed")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    # Ledger calls do blocking store and notifier I/O off the event loop,
    # one at a time.
    ledger_lock = threading.Lock()

    def _ledger(request: Request) -> NutritionLedger:
        state_container: AppContainer = request.app.state.container
        return state_container.ledger

    def _log_meal(
        ledger: NutritionLedger, estimate: MealEstimate, meal_type: str | None
    ) -> dict[str, object]:
        with ledger_lock:
            record = ledger.log_meal(estimate, meal_type)
            return _logged_payload(ledger, record)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.put("/profile")
    def update_profile(payload: ProfileRequest, request: Request) -> dict[str, object]:
        """Store the profile and return the recomputed daily target."""
        ledger = _ledger(request)
        with ledger_lock:
            try:
                target = ledger.update_profile(payload.to_profile())
            except InvalidProfileError as exc:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
                ) from exc
            return {
                "target": _target_payload(target),
                "tips": _tips_payload(ledger.tips()),
            }

    @app.get("/ledger")
    def get_ledger(request: Request) -> dict[str, object]:
        """Return profile, target, today's totals and tips."""
        ledger = _ledger(request)
        with ledger_lock:
            ledger.refresh_day()
            return _ledger_payload(ledger)

    @app.post("/meals")
    def log_meal(payload: MealRequest, request: Request) -> dict[str, object]:
        """Log a meal from an estimate supplied by the caller."""
        return _log_meal(_ledger(request), payload.to_estimate(), payload.meal_type)

    @app.post("/meals/photo")
    async def log_meal_photo(
        request: Request, meal_type: str | None = None
    ) -> dict[str, object]:
        """Predict nutrition for the uploaded image body and log it."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body must contain an image.",
            )
        try:
            estimate = await state_container.prediction_service.predict(image_bytes)
        except Exception as exc:
            logger.exception("Meal prediction failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_prediction_error(state_container, exc),
            ) from exc
        return await run_in_threadpool(
            _log_meal, state_container.ledger, estimate, meal_type
        )

    @app.get("/summary")
    async def get_summary(request: Request) -> dict[str, object]:
        """Return statistics over the whole meal history."""
        return _summary_payload(_ledger(request).summary())

    @app.get("/export/csv")
    async def export_csv(request: Request) -> PlainTextResponse:
        """Download the meal history as CSV."""
        return PlainTextResponse(
            meals_to_csv(_ledger(request).meals),
            media_type="text/csv",
            headers={
                "Content-Disposition": 'attachment; filename="nutrition_data.csv"'
            },
        )

    @app.get("/export/json")
    async def export_json(request: Request) -> Response:
        """Download the meal history as a JSON document."""
        return Response(
            meals_to_json(_ledger(request).meals),
            media_type="application/json",
            headers={
                "Content-Disposition": 'attachment; filename="nutrition_history.json"'
            },
        )

    @app.post("/reset")
    def reset(request: Request) -> dict[str, object]:
        """Clear today's totals and the meal history."""
        ledger = _ledger(request)
        with ledger_lock:
            ledger.reset()
            return _ledger_payload(ledger)

    return app


def _format_prediction_error(state_container: AppContainer, exc: Exception) -> str:
    """Return a user-facing prediction error with local debug info."""
    fallback = "Sorry, I couldn't analyze that photo. Please try a clearer shot."
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback


def _macros_payload(macros: MacroProfile) -> dict[str, float]:
    return {
        "calories": macros.calories,
        "protein": macros.protein_g,
        "fat": macros.fat_g,
        "carbs": macros.carbs_g,
    }


def _target_payload(target: DailyTarget | None) -> dict[str, float] | None:
    if target is None:
        return None
    return {
        "calories": target.calorie_target,
        "protein": target.protein_target_g,
        "fat": target.fat_target_g,
        "carbs": target.carb_target_g,
    }


def _profile_payload(profile: Profile | None) -> dict[str, object] | None:
    if profile is None:
        return None
    return {
        "name": profile.name,
        "age": profile.age,
        "weight": profile.weight_kg,
        "height": profile.height_cm,
        "activity_multiplier": profile.activity_multiplier,
        "goal": profile.goal.value,
    }


def _tips_payload(tips: list[Tip]) -> list[dict[str, str]]:
    return [{"code": tip.code, "message": tip.value} for tip in tips]


def _meal_payload(record: MealRecord) -> dict[str, object]:
    return {
        "time": record.timestamp.isoformat(),
        "meal_type": record.meal_type.value,
        **_macros_payload(record.macros),
    }


def _ledger_payload(ledger: NutritionLedger) -> dict[str, object]:
    return {
        "day": ledger.day.isoformat() if ledger.day else None,
        "profile": _profile_payload(ledger.profile),
        "target": _target_payload(ledger.target),
        "totals": _macros_payload(ledger.daily_totals),
        "meal_type_totals": {
            meal_type.value: _macros_payload(totals)
            for meal_type, totals in ledger.meal_type_totals.items()
        },
        "tips": _tips_payload(ledger.tips()),
        "meals": [_meal_payload(record) for record in ledger.meals],
    }


def _logged_payload(ledger: NutritionLedger, record: MealRecord) -> dict[str, object]:
    return {
        "meal": _meal_payload(record),
        "totals": _macros_payload(ledger.daily_totals),
        "tips": _tips_payload(ledger.tips()),
    }


def _summary_payload(summary: Summary) -> dict[str, object]:
    if not summary.has_data:
        return {"has_data": False, "total_meals": 0}
    return {
        "has_data": True,
        "total_meals": summary.total_meals,
        "total_calories": summary.total_calories,
        "avg_calories_per_meal": summary.avg_calories_per_meal,
        "most_caloric_meal_type": (
            summary.most_caloric_meal_type.value
            if summary.most_caloric_meal_type
            else None
        ),
    }
