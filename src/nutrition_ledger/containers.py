"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from supabase import create_client

from nutrition_ledger.adapters.json_file_store import JsonFileStateStore
from nutrition_ledger.adapters.openai_predictor_client import OpenAIPredictorClient
from nutrition_ledger.adapters.supabase_state_store import SupabaseStateStore
from nutrition_ledger.adapters.telegram_notifier import HttpxTelegramNotifier
from nutrition_ledger.config import Settings
from nutrition_ledger.services.ledger import (
    NutritionLedger,
    RolloverPolicy,
    StateStore,
)
from nutrition_ledger.services.notifications import Notifier
from nutrition_ledger.services.prediction import PredictionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: StateStore
    notifier: Notifier
    prediction_service: PredictionService
    ledger: NutritionLedger
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> StateStore:
    """Return the Supabase store when configured, else a local JSON file."""
    if settings.uses_supabase:
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseStateStore(client)
    return JsonFileStateStore(Path(settings.state_file))


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    notifier = HttpxTelegramNotifier.create(
        bot_token=resolved_settings.telegram_bot_token,
        chat_id=resolved_settings.telegram_chat_id,
    )
    predictor_client = OpenAIPredictorClient.create(resolved_settings.openai_api_key)
    prediction_service = PredictionService(
        client=predictor_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    ledger = NutritionLedger(
        store=store,
        notifier=notifier,
        timezone_name=resolved_settings.timezone,
        rollover=RolloverPolicy(resolved_settings.day_rollover),
        idle_threshold=timedelta(hours=resolved_settings.idle_reminder_hours),
    )
    ledger.load()

    async def close_resources() -> None:
        notifier.close()
        await predictor_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        notifier=notifier,
        prediction_service=prediction_service,
        ledger=ledger,
        close_resources=close_resources,
    )
