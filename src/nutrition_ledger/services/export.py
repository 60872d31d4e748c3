"""Export helpers for the meal history."""

import csv
import io
import json

from nutrition_ledger.domain.meals import MealRecord

CSV_HEADER = ["time", "mealType", "calories", "protein", "fat", "carbs"]


def meals_to_csv(records: list[MealRecord]) -> str:
    """Render meal records as CSV with one row per meal."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in records:
        row = _record_row(record)
        writer.writerow([row[column] for column in CSV_HEADER])
    return buffer.getvalue()


def meals_to_json(records: list[MealRecord]) -> str:
    """Render the full ordered meal sequence as a JSON document."""
    return json.dumps([_record_row(record) for record in records], indent=2)


def _record_row(record: MealRecord) -> dict[str, object]:
    return {
        "time": record.timestamp.isoformat(),
        "mealType": record.meal_type.value,
        "calories": record.calories,
        "protein": record.protein_g,
        "fat": record.fat_g,
        "carbs": record.carbs_g,
    }
