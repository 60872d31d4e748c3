"""Daily nutrition ledger: targets, meal logging, persistence."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import Protocol
from zoneinfo import ZoneInfo

from nutrition_ledger.domain.advice import Tip
from nutrition_ledger.domain.meals import (
    DailyTotals,
    MacroProfile,
    MealEstimate,
    MealRecord,
    MealType,
)
from nutrition_ledger.domain.profile import DailyTarget, Goal, Profile
from nutrition_ledger.domain.state import (
    DailyStateBlob,
    MacroBlob,
    MealRecordBlob,
    PersistedState,
    ProfileBlob,
)
from nutrition_ledger.domain.stats import Summary
from nutrition_ledger.services.advisor import advise_tips
from nutrition_ledger.services.notifications import (
    DEFAULT_IDLE_THRESHOLD,
    IDLE_MEAL_MESSAGE,
    CalorieAlertLatch,
    Notifier,
    is_meal_overdue,
    send_notification,
)
from nutrition_ledger.services.stats import summarize
from nutrition_ledger.services.targets import compute_target

PROFILE_KEY = "profile"
DAILY_STATE_KEY = "dailyState"
LAST_MEAL_KEY = "lastMealTimestamp"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MILLISECOND = timedelta(milliseconds=1)

_logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Key-value storage that survives across sessions."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if any."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    def remove(self, key: str) -> None:
        """Delete a key if present."""


class RolloverPolicy(Enum):
    """When daily totals start over."""

    MIDNIGHT = "midnight"
    MANUAL = "manual"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class NutritionLedger:
    """Owns the profile, daily totals and meal history of one user.

    Every method runs to completion synchronously. After each mutation the
    full state is written to the store; write failures are logged and the
    ledger keeps working in memory.
    """

    store: StateStore
    notifier: Notifier
    timezone_name: str = "UTC"
    rollover: RolloverPolicy = RolloverPolicy.MIDNIGHT
    idle_threshold: timedelta = DEFAULT_IDLE_THRESHOLD
    clock: Callable[[], datetime] = _utc_now

    profile: Profile | None = field(default=None, init=False)
    target: DailyTarget | None = field(default=None, init=False)
    daily_totals: DailyTotals = field(default_factory=DailyTotals, init=False)
    meal_type_totals: dict[MealType, MacroProfile] = field(
        default_factory=dict, init=False
    )
    meals: list[MealRecord] = field(default_factory=list, init=False)
    last_meal_at: datetime | None = field(default=None, init=False)
    day: date | None = field(default=None, init=False)
    calorie_alert: CalorieAlertLatch = field(
        default_factory=CalorieAlertLatch, init=False
    )

    def update_profile(self, profile: Profile) -> DailyTarget:
        """Replace the profile and recompute the daily target.

        Raises InvalidProfileError without touching state when the profile
        is missing a positive age, weight or height.
        """
        target = compute_target(profile)
        self._roll_over(self._now())
        self.profile = profile
        self.target = target
        self.calorie_alert.reset()
        self.save()
        return target

    def log_meal(
        self, estimate: MealEstimate, meal_type: MealType | str | None = None
    ) -> MealRecord:
        """Append a meal and fold it into today's totals."""
        now = self._now()
        self._roll_over(now)
        record = MealRecord(
            timestamp=now,
            meal_type=MealType.parse(meal_type),
            calories=estimate.calories,
            protein_g=estimate.protein_g,
            fat_g=estimate.fat_g,
            carbs_g=estimate.carbs_g,
        )
        self.meals.append(record)
        self.daily_totals = self.daily_totals.plus(record.macros)
        bucket = self.meal_type_totals.get(record.meal_type, MacroProfile())
        self.meal_type_totals[record.meal_type] = bucket.plus(record.macros)
        self.last_meal_at = now
        self.calorie_alert.evaluate(self.daily_totals, self.target, self.notifier)
        self.save()
        return record

    def tips(self) -> list[Tip]:
        """Return advisory tips for today's totals."""
        return advise_tips(self.daily_totals, self.target)

    def summary(self) -> Summary:
        """Return statistics over the whole meal history."""
        return summarize(self.meals)

    def refresh_day(self) -> bool:
        """Start a new day if the local date changed; return True if it did."""
        rolled = self._roll_over(self._now())
        if rolled:
            self.save()
        return rolled

    def reset(self) -> None:
        """Clear totals, buckets and the meal history; keep the profile."""
        self.daily_totals = DailyTotals()
        self.meal_type_totals = {}
        self.meals = []
        self.calorie_alert.reset()
        self.day = self._local_date(self._now())
        self.save()

    def check_idle_reminder(self) -> bool:
        """Send a one-shot reminder when no meal was logged for a while."""
        if not self.notifier.permission_granted:
            return False
        if not is_meal_overdue(self.last_meal_at, self._now(), self.idle_threshold):
            return False
        send_notification(self.notifier, IDLE_MEAL_MESSAGE)
        return True

    def serialize(self) -> PersistedState:
        """Return a snapshot of the ledger state."""
        return PersistedState(
            profile=_profile_to_blob(self.profile) if self.profile else None,
            daily_state=DailyStateBlob(
                daily_totals=_macros_to_blob(self.daily_totals),
                meal_records=[_record_to_blob(record) for record in self.meals],
                meal_type_totals={
                    meal_type.value: _macros_to_blob(totals)
                    for meal_type, totals in self.meal_type_totals.items()
                },
                day=self.day,
                calorie_alert_fired=self.calorie_alert.fired,
            ),
            last_meal_timestamp=(
                _to_epoch_ms(self.last_meal_at) if self.last_meal_at else None
            ),
        )

    def restore(self, state: PersistedState) -> None:
        """Replace in-memory state with a snapshot.

        Everything is converted before any field is assigned, so a snapshot
        that fails conversion leaves the ledger untouched.
        """
        profile = _profile_from_blob(state.profile) if state.profile else None
        target = compute_target(profile) if profile else None
        daily = state.daily_state
        meals = [_record_from_blob(blob) for blob in daily.meal_records]
        buckets: dict[MealType, MacroProfile] = {}
        for raw_type, blob in daily.meal_type_totals.items():
            meal_type = MealType.parse(raw_type)
            current = buckets.get(meal_type, MacroProfile())
            buckets[meal_type] = current.plus(_macros_from_blob(blob))
        last_meal_at = (
            _from_epoch_ms(state.last_meal_timestamp)
            if state.last_meal_timestamp is not None
            else None
        )

        self.profile = profile
        self.target = target
        self.daily_totals = _macros_from_blob(daily.daily_totals, DailyTotals)
        self.meal_type_totals = buckets
        self.meals = meals
        self.last_meal_at = last_meal_at
        self.day = daily.day or (
            self._local_date(last_meal_at) if last_meal_at else None
        )
        self.calorie_alert = CalorieAlertLatch(fired=daily.calorie_alert_fired)

    def save(self) -> None:
        """Write the full state to the store, logging failures."""
        state = self.serialize()
        try:
            if state.profile is None:
                self.store.remove(PROFILE_KEY)
            else:
                self.store.set(
                    PROFILE_KEY, state.profile.model_dump_json(by_alias=True)
                )
            self.store.set(
                DAILY_STATE_KEY, state.daily_state.model_dump_json(by_alias=True)
            )
            if state.last_meal_timestamp is None:
                self.store.remove(LAST_MEAL_KEY)
            else:
                self.store.set(LAST_MEAL_KEY, str(state.last_meal_timestamp))
        except Exception:
            _logger.exception("Failed to persist ledger state")

    def load(self) -> bool:
        """Restore state from the store; return True when a snapshot loaded.

        A malformed or unreadable snapshot is discarded as a whole and the
        ledger keeps its default state.
        """
        try:
            state = self._read_state()
            if state is None:
                return False
            self.restore(state)
        except Exception:
            _logger.exception("Discarding unreadable ledger state")
            return False
        _logger.info("Restored ledger state", extra={"meals": len(self.meals)})
        return True

    def _read_state(self) -> PersistedState | None:
        raw_profile = self.store.get(PROFILE_KEY)
        raw_daily = self.store.get(DAILY_STATE_KEY)
        raw_last_meal = self.store.get(LAST_MEAL_KEY)
        if raw_profile is None and raw_daily is None and raw_last_meal is None:
            return None
        return PersistedState(
            profile=(
                ProfileBlob.model_validate_json(raw_profile)
                if raw_profile is not None
                else None
            ),
            daily_state=(
                DailyStateBlob.model_validate_json(raw_daily)
                if raw_daily is not None
                else DailyStateBlob()
            ),
            last_meal_timestamp=(
                int(raw_last_meal) if raw_last_meal is not None else None
            ),
        )

    def _roll_over(self, now: datetime) -> bool:
        today = self._local_date(now)
        if self.day is None:
            self.day = today
            return False
        if self.rollover is RolloverPolicy.MANUAL or self.day == today:
            return False
        _logger.info("Starting a new ledger day", extra={"day": today.isoformat()})
        self.daily_totals = DailyTotals()
        self.meal_type_totals = {}
        self.calorie_alert.reset()
        self.day = today
        return True

    def _now(self) -> datetime:
        # Persisted timestamps carry millisecond precision.
        now = self.clock()
        return now.replace(microsecond=now.microsecond // 1000 * 1000)

    def _local_date(self, moment: datetime) -> date:
        return moment.astimezone(ZoneInfo(self.timezone_name)).date()


def _profile_to_blob(profile: Profile) -> ProfileBlob:
    return ProfileBlob(
        name=profile.name,
        age=profile.age,
        weight=profile.weight_kg,
        height=profile.height_cm,
        activity_multiplier=profile.activity_multiplier,
        goal=profile.goal.value,
    )


def _profile_from_blob(blob: ProfileBlob) -> Profile:
    return Profile(
        age=blob.age,
        weight_kg=blob.weight,
        height_cm=blob.height,
        activity_multiplier=blob.activity_multiplier,
        goal=Goal(blob.goal),
        name=blob.name,
    )


def _macros_to_blob(macros: MacroProfile) -> MacroBlob:
    return MacroBlob(
        calories=macros.calories,
        protein=macros.protein_g,
        fat=macros.fat_g,
        carbs=macros.carbs_g,
    )


def _macros_from_blob(
    blob: MacroBlob, kind: type[MacroProfile] = MacroProfile
) -> MacroProfile:
    return kind(
        calories=blob.calories,
        protein_g=blob.protein,
        fat_g=blob.fat,
        carbs_g=blob.carbs,
    )


def _record_to_blob(record: MealRecord) -> MealRecordBlob:
    return MealRecordBlob(
        timestamp=_to_epoch_ms(record.timestamp),
        meal_type=record.meal_type.value,
        calories=record.calories,
        protein=record.protein_g,
        fat=record.fat_g,
        carbs=record.carbs_g,
    )


def _record_from_blob(blob: MealRecordBlob) -> MealRecord:
    return MealRecord(
        timestamp=_from_epoch_ms(blob.timestamp),
        meal_type=MealType.parse(blob.meal_type),
        calories=blob.calories,
        protein_g=blob.protein,
        fat_g=blob.fat,
        carbs_g=blob.carbs,
    )


def _to_epoch_ms(moment: datetime) -> int:
    return (moment - _EPOCH) // _MILLISECOND


def _from_epoch_ms(value: int) -> datetime:
    return _EPOCH + value * _MILLISECOND

