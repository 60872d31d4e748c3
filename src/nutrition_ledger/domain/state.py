"""Serialized ledger state as stored in the key-value store."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Blob(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        ser_json_inf_nan="constants",
    )


class MacroBlob(_Blob):
    """Calories and macros; absent fields stay at zero."""

    calories: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0


class ProfileBlob(_Blob):
    """Most recent profile submitted by the user."""

    name: str | None = None
    age: float | None = None
    weight: float | None = None
    height: float | None = None
    activity_multiplier: float = 1.2
    goal: str = "maintain"


class MealRecordBlob(MacroBlob):
    """One logged meal; timestamp in epoch milliseconds."""

    timestamp: int
    meal_type: str = "other"


class DailyStateBlob(_Blob):
    """Totals, meal sequence and per-type buckets."""

    daily_totals: MacroBlob = Field(default_factory=MacroBlob)
    meal_records: list[MealRecordBlob] = Field(default_factory=list)
    meal_type_totals: dict[str, MacroBlob] = Field(default_factory=dict)
    day: date | None = None
    calorie_alert_fired: bool = False


class PersistedState(_Blob):
    """Full ledger snapshot."""

    profile: ProfileBlob | None = None
    daily_state: DailyStateBlob = Field(default_factory=DailyStateBlob)
    last_meal_timestamp: int | None = None
