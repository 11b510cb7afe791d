"""Append-only history of nutrition goals."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date

import pydantic

from simple_calorie.domain.errors import ValidationError
from simple_calorie.domain.goals import Goal, GoalTargets
from simple_calorie.services.backend import GOALS, Document, DocumentBackend
from simple_calorie.services.clock import Clock
from simple_calorie.services.days import parse_day

_logger = logging.getLogger(__name__)


@dataclass
class GoalHistory:
    """Stores goals and resolves which one applies on a given date."""

    backend: DocumentBackend
    clock: Clock = field(default_factory=Clock)

    async def append(self, goal_data: Mapping[str, object] | None = None) -> Goal:
        """Store a new goal starting today and return it with its id."""
        targets = _coerce_targets(goal_data or {})
        start_date = self.clock.today()
        document: Document = {
            "start_date": start_date.isoformat(),
            **targets.model_dump(),
        }
        goal_id = await self.backend.add(GOALS, document)
        _logger.info("Goal appended: goal_id=%s start_date=%s", goal_id, start_date)
        return _parse_goal({**document, "id": goal_id})

    async def active_as_of(self, day: date | str) -> Goal | None:
        """Return the latest goal whose start date is on or before ``day``."""
        upper = parse_day(day).isoformat()
        documents = await self.backend.range_descending(
            GOALS, "start_date", upper, limit=1
        )
        if not documents:
            return None
        return _parse_goal(documents[0])

    async def current(self) -> Goal | None:
        """Return the goal active today."""
        return await self.active_as_of(self.clock.today())

    async def all(self) -> list[Goal]:
        """Return every stored goal in insertion order."""
        documents = await self.backend.get_all(GOALS)
        return sorted((_parse_goal(doc) for doc in documents), key=lambda g: g.id)


def _coerce_targets(goal_data: Mapping[str, object]) -> GoalTargets:
    provided = {key: value for key, value in goal_data.items() if value is not None}
    try:
        return GoalTargets.model_validate(provided)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid goal: {exc}") from exc


def _parse_goal(row: Mapping[str, object]) -> Goal:
    """Parse a goal document into a domain model."""
    return Goal(
        id=int(row["id"]),
        start_date=date.fromisoformat(str(row["start_date"])),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        fat=float(row.get("fat", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        sugar=float(row.get("sugar", 0.0)),
        water=float(row.get("water", 0.0)),
    )
