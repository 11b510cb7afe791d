"""Models for nutrition analysis results."""

from pydantic import BaseModel, Field


class AnalyzedItem(BaseModel):
    """Structured item returned by the analysis service."""

    name: str = Field(min_length=1)
    calories: float
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    sugar: float = 0.0
    amount: float = 100.0
    unit: str = "g"

    def as_item_payload(self, category: str = "") -> dict[str, object]:
        """Return a payload accepted by the day log and favorites stores."""
        return {**self.model_dump(), "category": category}
