"""User-ordered list of favorite items."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime

from simple_calorie.domain.days import Item
from simple_calorie.domain.errors import NotFoundError, ValidationError
from simple_calorie.domain.favorites import FavoriteEntry, FavoriteMembership
from simple_calorie.services.backend import FAVORITES, Document, DocumentBackend
from simple_calorie.services.clock import Clock
from simple_calorie.services.days import coerce_item

_logger = logging.getLogger(__name__)


@dataclass
class FavoritesList:
    """Favorites ordered ascending by a numeric ``sort_order`` key."""

    backend: DocumentBackend
    clock: Clock = field(default_factory=Clock)

    async def add(self, item: Item | Mapping[str, object]) -> FavoriteEntry:
        """Save an item after the current last favorite."""
        entry = coerce_item(item)
        favorites = await self.list()
        max_order = max((fav.sort_order for fav in favorites), default=0)
        now = self.clock.now()
        document: Document = {
            **entry.model_dump(mode="json", exclude={"timestamp"}),
            "added_date": now.date().isoformat(),
            "timestamp": now.isoformat(),
            "sort_order": max_order + 1,
        }
        await self.backend.put(FAVORITES, entry.id, document)
        _logger.info("Favorite added: id=%s sort_order=%s", entry.id, max_order + 1)
        return _parse_favorite(document)

    async def remove(self, favorite_id: str) -> None:
        """Delete a favorite without renumbering the others."""
        await self.backend.delete(FAVORITES, favorite_id)
        _logger.info("Favorite removed: id=%s", favorite_id)

    async def list(self) -> list[FavoriteEntry]:
        """Return all favorites ascending by sort order."""
        documents = await self.backend.get_all(FAVORITES)
        favorites = [_parse_favorite(document) for document in documents]
        return sorted(
            favorites, key=lambda fav: (fav.sort_order, fav.timestamp, fav.id)
        )

    async def set_order(self, favorite_id: str, new_order: float) -> FavoriteEntry:
        """Overwrite the sort order of one favorite."""
        if isinstance(new_order, bool) or not isinstance(new_order, int | float):
            raise ValidationError(f"Invalid sort order: {new_order!r}")
        document = await self._require(favorite_id)
        updated = {**document, "sort_order": new_order}
        await self.backend.put(FAVORITES, favorite_id, updated)
        return _parse_favorite(updated)

    async def move_to_top(self, favorite_id: str) -> None:
        """Place a favorite strictly before every other entry."""
        documents = await self._snapshot(favorite_id)
        others = [
            float(document.get("sort_order") or 0)
            for key, document in documents.items()
            if key != favorite_id
        ]
        shift = max(1.0, 1.0 - min(others, default=0.0))
        updates = {
            key: {
                **document,
                "sort_order": 0
                if key == favorite_id
                else float(document.get("sort_order") or 0) + shift,
            }
            for key, document in documents.items()
        }
        await self.backend.put_many(FAVORITES, updates)
        _logger.info("Favorite moved to top: id=%s", favorite_id)

    async def move_to_bottom(self, favorite_id: str) -> None:
        """Place a favorite after the current last entry."""
        documents = await self._snapshot(favorite_id)
        max_order = max(
            float(document.get("sort_order") or 0) for document in documents.values()
        )
        target = {**documents[favorite_id], "sort_order": max_order + 1}
        await self.backend.put_many(FAVORITES, {favorite_id: target})
        _logger.info("Favorite moved to bottom: id=%s", favorite_id)

    async def swap(self, first_id: str, second_id: str) -> None:
        """Exchange the sort orders of two favorites."""
        first = await self._require(first_id)
        second = await self._require(second_id)
        await self.backend.put_many(
            FAVORITES,
            {
                first_id: {**first, "sort_order": second.get("sort_order")},
                second_id: {**second, "sort_order": first.get("sort_order")},
            },
        )
        _logger.info("Favorites swapped: first=%s second=%s", first_id, second_id)

    async def membership(
        self, name: str, amount: float | None = None
    ) -> FavoriteMembership:
        """Report whether ``name`` is saved with the same or another amount."""
        favorites = await self.list()
        named = [fav for fav in favorites if fav.name == name]
        exact = any(amount is None or fav.amount == amount for fav in named)
        different_amount = amount is not None and any(
            fav.amount != amount for fav in named
        )
        return FavoriteMembership(exact=exact, different_amount=different_amount)

    async def _require(self, favorite_id: str) -> Document:
        document = await self.backend.get(FAVORITES, favorite_id)
        if document is None:
            _logger.warning("Favorite missing: id=%s", favorite_id)
            raise NotFoundError("favorite", favorite_id)
        return document

    async def _snapshot(self, favorite_id: str) -> dict[str, Document]:
        documents = await self.backend.get_all(FAVORITES)
        snapshot = {str(document["id"]): document for document in documents}
        if favorite_id not in snapshot:
            _logger.warning("Favorite missing: id=%s", favorite_id)
            raise NotFoundError("favorite", favorite_id)
        return snapshot


def _parse_favorite(row: Mapping[str, object]) -> FavoriteEntry:
    """Parse a favorite document into a domain model."""
    amount = row.get("amount")
    return FavoriteEntry(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        fat=float(row.get("fat", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        sugar=float(row.get("sugar", 0.0)),
        amount=float(amount) if amount is not None else None,
        unit=str(row.get("unit", "g")),
        category=str(row.get("category", "")),
        photo=row.get("photo"),
        added_date=date.fromisoformat(str(row["added_date"])),
        timestamp=datetime.fromisoformat(str(row["timestamp"])),
        sort_order=float(row.get("sort_order") or 0),
    )
