"""Domain models for nutrition goals."""

from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class Goal:
    """Nutrition targets effective from ``start_date`` until superseded."""

    id: int
    start_date: date
    calories: float
    protein: float
    fat: float
    carbs: float
    sugar: float
    water: float


class GoalTargets(BaseModel):
    """Caller-supplied targets; missing values fall back to defaults."""

    model_config = ConfigDict(extra="ignore")

    calories: float = 2000
    protein: float = 100
    fat: float = 70
    carbs: float = 250
    sugar: float = 50
    water: float = 2000
