"""Domain models for daily summaries."""

from dataclasses import dataclass
from datetime import date

from simple_calorie.domain.goals import Goal


@dataclass(frozen=True)
class NutrientTotals:
    """Summed nutrients for a set of items."""

    calories: float
    protein: float
    fat: float
    carbs: float
    sugar: float


@dataclass(frozen=True)
class DailySummary:
    """Totals for one day next to the goal active on that day."""

    day: date
    totals: NutrientTotals
    liquid_intake: float
    item_count: int
    goal: Goal | None
