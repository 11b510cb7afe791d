"""Domain models for per-day consumption logs."""

from datetime import date, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

DRINKS_CATEGORY = "drinks"
LITRE_UNIT = "l"
MILLILITRES_PER_LITRE = 1000


class Item(BaseModel):
    """A single consumed food or drink entry."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid4()), min_length=1)
    name: str = Field(min_length=1)
    calories: float
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    sugar: float = 0.0
    amount: float | None = None
    unit: str = "g"
    category: str = ""
    timestamp: datetime | None = None
    photo: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _assign_missing_id(cls, value: object) -> object:
        if not value:
            return str(uuid4())
        return value


class DayRecord(BaseModel):
    """Consumption record for one calendar day."""

    date: date
    goal_id: int | None = None
    items: list[Item] = Field(default_factory=list)
    liquid_intake: float = 0.0

    def find_item(self, item_id: str) -> int | None:
        """Return the index of the item with the given id, if present."""
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None
