"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from nutrition_ledger.config import Settings
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.prediction import NutritionPrediction
from nutrition_ledger.domain.profile import Goal, Profile
from nutrition_ledger.services.ledger import NutritionLedger, StateStore
from nutrition_ledger.services.notifications import Notifier
from nutrition_ledger.services.prediction import PredictionService, PredictorClient


@dataclass
class InMemoryStateStore(StateStore):
    """In-memory key-value store for tests."""

    entries: dict[str, str] = field(default_factory=dict)
    writes: int = 0

    def get(self, key: str) -> str | None:
        return self.entries.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.entries[key] = value

    def remove(self, key: str) -> None:
        self.entries.pop(key, None)


@dataclass
class FailingStateStore(StateStore):
    """Store whose writes and reads always fail."""

    def get(self, key: str) -> str | None:
        raise OSError("store unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("store unavailable")

    def remove(self, key: str) -> None:
        raise OSError("store unavailable")


@dataclass
class FakeNotifier(Notifier):
    """Notifier that records messages and whether an event loop was running."""

    granted: bool = True
    messages: list[str] = field(default_factory=list)
    on_event_loop: list[bool] = field(default_factory=list)

    @property
    def permission_granted(self) -> bool:
        return self.granted

    def notify(self, message: str) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.on_event_loop.append(False)
        else:
            self.on_event_loop.append(True)
        self.messages.append(message)


@dataclass
class RaisingNotifier(Notifier):
    """Notifier whose delivery always fails."""

    attempts: int = 0

    @property
    def permission_granted(self) -> bool:
        return True

    def notify(self, message: str) -> None:
        self.attempts += 1
        raise ConnectionError("notifier unreachable")


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = datetime(2024, 3, 10, 8, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class FakePredictorClient(PredictorClient):
    """Fake predictor client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "calories": 640.0,
            "protein_g": 32.0,
            "fat_g": 21.5,
            "carbs_g": 78.0,
            "description": "chicken with rice",
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append({"model": model, "image_data_url": image_data_url})
        return NutritionPrediction.model_validate(self.payload)


@dataclass
class FailingPredictorClient(PredictorClient):
    """Predictor client that always raises."""

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
        raise RuntimeError("model offline")


def sample_profile(goal: Goal = Goal.MAINTAIN) -> Profile:
    return Profile(
        age=30,
        weight_kg=70,
        height_cm=175,
        activity_multiplier=1.55,
        goal=goal,
        name="Sam",
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        state_file=str(tmp_path / "ledger_state.json"),
        environment="test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def ledger(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> NutritionLedger:
    return NutritionLedger(store=store, notifier=notifier, clock=clock)


@pytest.fixture
def predictor_client() -> FakePredictorClient:
    return FakePredictorClient()


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryStateStore,
    notifier: FakeNotifier,
    ledger: NutritionLedger,
    predictor_client: FakePredictorClient,
) -> AppContainer:
    prediction_service = PredictionService(
        client=predictor_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        notifier=notifier,
        prediction_service=prediction_service,
        ledger=ledger,
        close_resources=close_resources,
    )
