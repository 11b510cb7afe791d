"""Nutrition analysis of photos and descriptions via an LLM."""

import json
import re
from dataclasses import dataclass
from typing import Protocol

import pydantic

from simple_calorie.domain.analysis import AnalyzedItem
from simple_calorie.domain.errors import ValidationError

PRODUCT_PROMPT = (
    "Estimate the nutrition of the food or drink shown or described. "
    "Respond with JSON only, using the keys name, calories, protein, fat, "
    "carbs, sugar, amount and unit (g, ml or l). Values are for the whole "
    "portion."
)
TABLE_PROMPT = (
    "Read the nutrition facts table in the first image and compute the "
    "values for the described portion. Respond with JSON only, using the "
    "keys name, calories, protein, fat, carbs, sugar, amount and unit "
    "(g, ml or l)."
)
_FENCE_RE = re.compile(r"```json\n?|\n?```")
_NUMERIC_FIELDS = ("calories", "protein", "fat", "carbs", "sugar")


class AnalysisClient(Protocol):
    """Interface for a chat-style LLM that accepts images."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        prompt: str,
        image_data_urls: list[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the raw text reply."""


@dataclass
class AnalysisService:
    """Builds analysis prompts and validates the structured reply."""

    client: AnalysisClient
    model: str
    temperature: float
    max_tokens: int

    async def analyze_product(  # noqa: PLR0913
        self,
        photos: list[str] | None = None,
        name: str = "",
        amount: float | None = None,
        unit: str = "",
        comment: str = "",
    ) -> AnalyzedItem:
        """Analyze a product from up to two photos and optional details."""
        prompt = _with_details(PRODUCT_PROMPT, name, amount, unit, comment)
        return await self._run(prompt, [photo for photo in photos or [] if photo])

    async def analyze_table(  # noqa: PLR0913
        self,
        table_photo: str,
        dish_photo: str | None = None,
        name: str = "",
        amount: float | None = None,
        unit: str = "",
        comment: str = "",
    ) -> AnalyzedItem:
        """Analyze a product from a photo of its nutrition table."""
        if not table_photo:
            raise ValidationError("A nutrition table photo is required")
        photos = [table_photo] + ([dish_photo] if dish_photo else [])
        prompt = _with_details(TABLE_PROMPT, name, amount, unit, comment)
        return await self._run(prompt, photos)

    async def _run(self, prompt: str, photos: list[str]) -> AnalyzedItem:
        text = await self.client.complete(
            model=self.model,
            prompt=prompt,
            image_data_urls=photos,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return parse_analysis_result(text)


def parse_analysis_result(text: str) -> AnalyzedItem:
    """Parse an LLM reply into an analyzed item."""
    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValidationError("Analysis reply is not valid JSON") from exc
    if not isinstance(data, dict) or not data.get("name"):
        raise ValidationError("Analysis reply is missing a name")
    if isinstance(data.get("calories"), bool) or not isinstance(
        data.get("calories"), int | float
    ):
        raise ValidationError("Analysis reply is missing numeric calories")
    payload: dict[str, object] = {"name": str(data["name"])}
    for key in _NUMERIC_FIELDS:
        payload[key] = _to_float(data.get(key))
    payload["amount"] = _to_float(data.get("amount")) or 100.0
    payload["unit"] = str(data.get("unit") or "g")
    try:
        return AnalyzedItem.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid analysis reply: {exc}") from exc


def _with_details(
    prompt: str, name: str, amount: float | None, unit: str, comment: str
) -> str:
    lines = [prompt]
    if name:
        lines.append(f"Product name: {name}")
    if amount and unit:
        lines.append(f"Weight/Volume: {amount:g}{unit}")
    if comment:
        lines.append(f"Additional info: {comment}")
    return "\n".join(lines)


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
