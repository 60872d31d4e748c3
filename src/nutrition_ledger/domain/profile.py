"""Domain models for the user profile and its daily target."""

from dataclasses import dataclass
from enum import Enum


class Goal(Enum):
    """Dietary goal applied to the energy target."""

    MAINTAIN = "maintain"
    LOSS = "loss"
    GAIN = "gain"


@dataclass(frozen=True)
class Profile:
    """User physiology and goal.

    Values may be missing when they come straight from a form; the target
    calculator rejects such profiles.
    """

    age: float | None
    weight_kg: float | None
    height_cm: float | None
    activity_multiplier: float
    goal: Goal = Goal.MAINTAIN
    name: str | None = None


@dataclass(frozen=True)
class DailyTarget:
    """Daily calorie and macro goal derived from a profile."""

    calorie_target: float
    protein_target_g: float
    fat_target_g: float
    carb_target_g: float
