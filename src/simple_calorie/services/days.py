"""Per-day consumption log with a derived liquid intake total."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime

import pydantic

from simple_calorie.domain.days import (
    DRINKS_CATEGORY,
    LITRE_UNIT,
    MILLILITRES_PER_LITRE,
    DayRecord,
    Item,
)
from simple_calorie.domain.errors import NotFoundError, ValidationError
from simple_calorie.services.backend import DAYS, DocumentBackend
from simple_calorie.services.clock import Clock

_logger = logging.getLogger(__name__)


def drink_volume_ml(item: Item | None) -> float:
    """Return the item's contribution to liquid intake in millilitres."""
    if item is None or item.category != DRINKS_CATEGORY or not item.amount:
        return 0.0
    if item.unit == LITRE_UNIT:
        return item.amount * MILLILITRES_PER_LITRE
    return item.amount


def liquid_intake_delta(before: Item | None, after: Item | None) -> float:
    """Change in liquid intake when ``before`` is replaced by ``after``."""
    return drink_volume_ml(after) - drink_volume_ml(before)


def parse_day(value: date | str) -> date:
    """Normalize a date or ISO ``YYYY-MM-DD`` string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def coerce_item(payload: Item | Mapping[str, object]) -> Item:
    """Validate an item payload, assigning an id when absent."""
    if isinstance(payload, Item):
        return payload
    try:
        return Item.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid item: {exc}") from exc


@dataclass
class DayLogStore:
    """Read-modify-write store for daily consumption records."""

    backend: DocumentBackend
    clock: Clock = field(default_factory=Clock)

    async def get_or_create(self, day: date | str) -> DayRecord:
        """Return the stored record or an empty skeleton for the date."""
        key = parse_day(day)
        document = await self.backend.get(DAYS, key.isoformat())
        if document is None:
            return DayRecord(date=key)
        return DayRecord.model_validate(document)

    async def list_days(self) -> list[DayRecord]:
        """Return every stored day record in date order."""
        documents = await self.backend.get_all(DAYS)
        records = [DayRecord.model_validate(document) for document in documents]
        return sorted(records, key=lambda record: record.date)

    async def add_item(
        self, day: date | str, item: Item | Mapping[str, object]
    ) -> DayRecord:
        """Prepend an item to the day and account for drinks."""
        key = parse_day(day)
        entry = coerce_item(item)
        record = await self.get_or_create(key)
        stored = entry.model_copy(update={"timestamp": self.clock.now()})
        updated = record.model_copy(
            update={
                "items": [stored, *record.items],
                "liquid_intake": record.liquid_intake
                + liquid_intake_delta(None, stored),
            }
        )
        await self._save(updated)
        _logger.info("Day item added: date=%s item_id=%s", key, stored.id)
        return updated

    async def update_item(
        self, day: date | str, item_id: str, patch: Mapping[str, object]
    ) -> DayRecord:
        """Merge ``patch`` into an item and recompute liquid intake."""
        key = parse_day(day)
        record = await self.get_or_create(key)
        index = record.find_item(item_id)
        if index is None:
            _logger.warning("Day item missing: date=%s item_id=%s", key, item_id)
            raise NotFoundError("item", item_id)
        before = record.items[index]
        merged = {**before.model_dump(), **patch, "id": before.id}
        after = coerce_item(merged)
        items = list(record.items)
        items[index] = after
        updated = record.model_copy(
            update={
                "items": items,
                "liquid_intake": record.liquid_intake
                + liquid_intake_delta(before, after),
            }
        )
        await self._save(updated)
        _logger.info("Day item updated: date=%s item_id=%s", key, item_id)
        return updated

    async def delete_item(self, day: date | str, item_id: str) -> DayRecord:
        """Remove an item and subtract its drink contribution."""
        key = parse_day(day)
        record = await self.get_or_create(key)
        index = record.find_item(item_id)
        if index is None:
            _logger.warning("Day item missing: date=%s item_id=%s", key, item_id)
            raise NotFoundError("item", item_id)
        removed = record.items[index]
        items = record.items[:index] + record.items[index + 1 :]
        updated = record.model_copy(
            update={
                "items": items,
                "liquid_intake": record.liquid_intake
                + liquid_intake_delta(removed, None),
            }
        )
        await self._save(updated)
        _logger.info("Day item deleted: date=%s item_id=%s", key, item_id)
        return updated

    async def adjust_liquid_intake(
        self, day: date | str, delta_ml: float
    ) -> DayRecord:
        """Add a manual liquid adjustment without creating an item."""
        key = parse_day(day)
        if isinstance(delta_ml, bool) or not isinstance(delta_ml, int | float):
            raise ValidationError(f"Invalid liquid delta: {delta_ml!r}")
        record = await self.get_or_create(key)
        updated = record.model_copy(
            update={"liquid_intake": record.liquid_intake + delta_ml}
        )
        await self._save(updated)
        _logger.info("Liquid intake adjusted: date=%s delta_ml=%s", key, delta_ml)
        return updated

    async def _save(self, record: DayRecord) -> None:
        await self.backend.put(
            DAYS, record.date.isoformat(), record.model_dump(mode="json")
        )
