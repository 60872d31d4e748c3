"""Threshold advisor comparing daily totals with the target."""

from nutrition_ledger.domain.advice import Tip
from nutrition_ledger.domain.meals import MacroProfile
from nutrition_ledger.domain.profile import DailyTarget

LOW_INTAKE_RATIO = 0.4


def advise_tips(totals: MacroProfile, target: DailyTarget | None) -> list[Tip]:
    """Return tips for the current totals, in a fixed order."""
    if target is None:
        return []
    tips: list[Tip] = []
    if totals.calories > target.calorie_target:
        tips.append(Tip.CALORIE_LIMIT_EXCEEDED)
    if totals.protein_g < target.protein_target_g * LOW_INTAKE_RATIO:
        tips.append(Tip.PROTEIN_LOW)
    if totals.carbs_g < target.carb_target_g * LOW_INTAKE_RATIO:
        tips.append(Tip.CARBS_LOW)
    if totals.fat_g < target.fat_target_g * LOW_INTAKE_RATIO:
        tips.append(Tip.FAT_LOW)
    return tips or [Tip.BALANCED]
