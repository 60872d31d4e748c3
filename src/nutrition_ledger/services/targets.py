"""Daily target calculation from a user profile."""

import math

from nutrition_ledger.domain.profile import DailyTarget, Goal, Profile

_GOAL_MULTIPLIERS = {
    Goal.MAINTAIN: 1.0,
    Goal.LOSS: 0.82,
    Goal.GAIN: 1.15,
}

PROTEIN_G_PER_KG = 1.8
FAT_G_PER_KG = 0.9
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


class InvalidProfileError(ValueError):
    """Raised when a profile is missing a required positive value."""


def compute_target(profile: Profile) -> DailyTarget:
    """Compute the daily calorie and macro target for a profile.

    Uses the Mifflin-St Jeor baseline scaled by the activity multiplier and
    the goal adjustment. Carbs take whatever energy protein and fat leave
    over, so the result can be negative for extreme inputs.
    """
    validate_profile(profile)
    base_rate = (
        10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age + 5
    )
    energy_target = base_rate * profile.activity_multiplier
    energy_target *= _GOAL_MULTIPLIERS[profile.goal]

    protein = profile.weight_kg * PROTEIN_G_PER_KG
    fat = profile.weight_kg * FAT_G_PER_KG
    carbs = (
        energy_target - protein * KCAL_PER_G_PROTEIN - fat * KCAL_PER_G_FAT
    ) / KCAL_PER_G_CARBS
    return DailyTarget(
        calorie_target=energy_target,
        protein_target_g=protein,
        fat_target_g=fat,
        carb_target_g=carbs,
    )


def validate_profile(profile: Profile) -> None:
    """Raise InvalidProfileError unless age, weight and height are positive."""
    missing = [
        label
        for label, value in (
            ("age", profile.age),
            ("weight", profile.weight_kg),
            ("height", profile.height_cm),
        )
        if not _is_positive(value)
    ]
    if missing:
        raise InvalidProfileError(
            f"Profile fields must be positive numbers: {', '.join(missing)}"
        )


def _is_positive(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and value > 0
