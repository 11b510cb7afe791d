"""Daily and weekly nutrient summaries."""

import math
from dataclasses import dataclass
from datetime import date, timedelta

from simple_calorie.domain.days import Item
from simple_calorie.domain.summary import DailySummary, NutrientTotals
from simple_calorie.services.days import DayLogStore, parse_day
from simple_calorie.services.goals import GoalHistory

DAYS_PER_WEEK = 7


@dataclass
class DailySummaryService:
    """Combines a day's items with the goal active on that day."""

    day_log: DayLogStore
    goals: GoalHistory

    async def summarize(self, day: date | str) -> DailySummary:
        """Return rounded totals, liquid intake and the active goal."""
        record = await self.day_log.get_or_create(day)
        goal = await self.goals.active_as_of(record.date)
        return DailySummary(
            day=record.date,
            totals=sum_nutrients(record.items),
            liquid_intake=record.liquid_intake,
            item_count=len(record.items),
            goal=goal,
        )

    async def summarize_week(self, day: date | str) -> list[DailySummary]:
        """Return summaries for the Monday-to-Sunday week containing ``day``."""
        return [await self.summarize(current) for current in week_dates(day)]


def week_dates(day: date | str) -> list[date]:
    """Return the dates of the Monday-based week containing ``day``."""
    resolved = parse_day(day)
    monday = resolved - timedelta(days=resolved.weekday())
    return [monday + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]


def sum_nutrients(items: list[Item]) -> NutrientTotals:
    """Sum nutrients, rounding to one decimal and calories up to a whole."""
    calories = protein = fat = carbs = sugar = 0.0
    for item in items:
        calories += item.calories
        protein += item.protein
        fat += item.fat
        carbs += item.carbs
        sugar += item.sugar
    return NutrientTotals(
        calories=float(math.ceil(round(calories, 1))),
        protein=round(protein, 1),
        fat=round(fat, 1),
        carbs=round(carbs, 1),
        sugar=round(sugar, 1),
    )
