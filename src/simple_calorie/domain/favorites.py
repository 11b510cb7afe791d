"""Domain models for the favorites list."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class FavoriteEntry:
    """A saved item with a user-controlled position."""

    id: str
    name: str
    calories: float
    protein: float
    fat: float
    carbs: float
    sugar: float
    amount: float | None
    unit: str
    category: str
    photo: str | None
    added_date: date
    timestamp: datetime
    sort_order: float


@dataclass(frozen=True)
class FavoriteMembership:
    """Whether a name is already saved, with the same or another amount."""

    exact: bool
    different_amount: bool
