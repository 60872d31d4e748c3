"""Advisory tips derived from daily totals."""

from enum import Enum


class Tip(Enum):
    """Short advisory message shown next to the daily totals."""

    CALORIE_LIMIT_EXCEEDED = "You exceeded your daily calorie limit!"
    PROTEIN_LOW = "Add more protein sources (eggs, chicken, cottage cheese)."
    CARBS_LOW = "Low carbs. Add grains, fruits or rice."
    FAT_LOW = "You need more healthy fats (nuts, avocado, fish)."
    BALANCED = "Perfect balance today!"

    @property
    def code(self) -> str:
        return self.name.lower()
