"""Summary statistics over the meal history."""

from nutrition_ledger.domain.meals import MealRecord, MealType
from nutrition_ledger.domain.stats import Summary


def summarize(records: list[MealRecord]) -> Summary:
    """Aggregate all retained meals into a summary.

    An empty history yields a summary without averages instead of dividing
    by zero.
    """
    if not records:
        return Summary(
            total_meals=0,
            total_calories=0.0,
            avg_calories_per_meal=None,
            most_caloric_meal_type=None,
        )

    calories_by_type = {meal_type: 0.0 for meal_type in MealType}
    total_calories = 0.0
    for record in records:
        calories_by_type[record.meal_type] += record.calories
        total_calories += record.calories

    return Summary(
        total_meals=len(records),
        total_calories=total_calories,
        avg_calories_per_meal=total_calories / len(records),
        most_caloric_meal_type=_most_caloric(calories_by_type, records),
    )


def _most_caloric(
    calories_by_type: dict[MealType, float], records: list[MealRecord]
) -> MealType:
    # Only buckets that actually hold meals compete; ties keep the first in
    # canonical order because max() returns the first maximal element.
    used = {record.meal_type for record in records}
    candidates = [meal_type for meal_type in MealType if meal_type in used]
    return max(candidates, key=lambda meal_type: calories_by_type[meal_type])
