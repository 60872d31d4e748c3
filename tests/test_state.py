"""Tests for ledger serialization and persistence."""

import json
from datetime import UTC, datetime, timedelta

from nutrition_ledger.domain.meals import MealEstimate, MealType
from nutrition_ledger.domain.profile import Goal
from nutrition_ledger.domain.state import PersistedState
from nutrition_ledger.services.ledger import NutritionLedger
from tests.conftest import (
    FailingStateStore,
    FakeClock,
    FakeNotifier,
    InMemoryStateStore,
    sample_profile,
)


def _populated_ledger(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> NutritionLedger:
    ledger = NutritionLedger(store=store, notifier=notifier, clock=clock)
    ledger.update_profile(sample_profile(Goal.LOSS))
    ledger.log_meal(
        MealEstimate(calories=450, protein_g=30, fat_g=15, carbs_g=50), "breakfast"
    )
    clock.advance(hours=5, microseconds=123456)
    ledger.log_meal(
        MealEstimate(calories=1900, protein_g=60, fat_g=70, carbs_g=210), "lunch"
    )
    return ledger


def test_restore_serialize_round_trip(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> None:
    original = _populated_ledger(store, notifier, clock)
    copy = NutritionLedger(store=InMemoryStateStore(), notifier=notifier, clock=clock)

    copy.restore(original.serialize())

    assert copy.profile == original.profile
    assert copy.target == original.target
    assert copy.daily_totals == original.daily_totals
    assert copy.meals == original.meals
    assert copy.meal_type_totals == original.meal_type_totals
    assert copy.last_meal_at == original.last_meal_at
    assert copy.day == original.day
    assert copy.calorie_alert.fired


def test_load_reads_state_written_by_another_session(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> None:
    original = _populated_ledger(store, notifier, clock)

    restored = NutritionLedger(store=store, notifier=notifier, clock=clock)

    assert restored.load()
    assert restored.meals == original.meals
    assert restored.serialize() == original.serialize()


def test_persisted_keys_use_documented_layout(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> None:
    ledger = _populated_ledger(store, notifier, clock)

    profile = json.loads(store.entries["profile"])
    daily = json.loads(store.entries["dailyState"])

    assert profile["goal"] == "loss"
    assert profile["weight"] == 70
    assert set(daily) >= {"dailyTotals", "mealRecords", "mealTypeTotals"}
    assert daily["mealRecords"][0]["mealType"] == "breakfast"
    elapsed = ledger.last_meal_at - datetime(1970, 1, 1, tzinfo=UTC)
    assert int(store.entries["lastMealTimestamp"]) == elapsed // timedelta(
        milliseconds=1
    )


def test_missing_fields_default_to_zero(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> None:
    store.entries["dailyState"] = json.dumps(
        {
            "dailyTotals": {"calories": 300},
            "mealRecords": [{"timestamp": 1710057600000, "calories": 300}],
        }
    )
    ledger = NutritionLedger(store=store, notifier=notifier, clock=clock)

    assert ledger.load()
    assert ledger.profile is None
    assert ledger.daily_totals.calories == 300
    assert ledger.daily_totals.protein_g == 0
    assert ledger.meals[0].meal_type is MealType.OTHER
    assert ledger.meal_type_totals == {}
    assert ledger.last_meal_at is None


def test_legacy_bucket_names_merge_into_other(
    notifier: FakeNotifier, clock: FakeClock
) -> None:
    state = PersistedState.model_validate(
        {
            "dailyState": {
                "mealTypeTotals": {
                    "unknown": {"calories": 100},
                    "other": {"calories": 50},
                    "lunch": {"calories": 400},
                }
            }
        }
    )
    ledger = NutritionLedger(store=InMemoryStateStore(), notifier=notifier, clock=clock)

    ledger.restore(state)

    assert ledger.meal_type_totals[MealType.OTHER].calories == 150
    assert ledger.meal_type_totals[MealType.LUNCH].calories == 400


def test_malformed_state_is_discarded_entirely(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> None:
    store.entries["profile"] = json.dumps(
        {"age": 30, "weight": 70, "height": 175, "activityMultiplier": 1.5}
    )
    store.entries["dailyState"] = "{not json"
    ledger = NutritionLedger(store=store, notifier=notifier, clock=clock)

    assert not ledger.load()
    assert ledger.profile is None
    assert ledger.target is None
    assert ledger.meals == []


def test_invalid_stored_profile_is_discarded(
    store: InMemoryStateStore, notifier: FakeNotifier, clock: FakeClock
) -> None:
    store.entries["profile"] = json.dumps({"age": 0, "weight": 70, "height": 175})
    store.entries["lastMealTimestamp"] = "1710057600000"
    ledger = NutritionLedger(store=store, notifier=notifier, clock=clock)

    assert not ledger.load()
    assert ledger.last_meal_at is None


def test_empty_store_loads_nothing(ledger: NutritionLedger) -> None:
    assert not ledger.load()
    assert ledger.meals == []


def test_store_failures_do_not_break_the_ledger(
    notifier: FakeNotifier, clock: FakeClock
) -> None:
    ledger = NutritionLedger(store=FailingStateStore(), notifier=notifier, clock=clock)

    assert not ledger.load()
    ledger.update_profile(sample_profile())
    ledger.log_meal(MealEstimate(calories=500), "lunch")

    assert ledger.daily_totals.calories == 500
    assert len(ledger.meals) == 1
