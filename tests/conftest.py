"""Shared test fixtures."""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from simple_calorie.config import Settings
from simple_calorie.domain.errors import BackendError
from simple_calorie.services.analysis import AnalysisClient
from simple_calorie.services.backend import (
    Collection,
    Document,
    DocumentBackend,
    Key,
    with_key,
)
from simple_calorie.services.clock import Clock


@dataclass
class InMemoryDocumentBackend(DocumentBackend):
    """In-memory document backend for tests."""

    tables: dict[str, dict[Key, Document]] = field(default_factory=dict)
    counters: dict[str, int] = field(default_factory=dict)
    writes: list[tuple[str, list[Key]]] = field(default_factory=list)
    fail_writes: bool = False
    closed: bool = False

    def _table(self, collection: Collection) -> dict[Key, Document]:
        return self.tables.setdefault(collection.name, {})

    async def get(self, collection: Collection, key: Key) -> Document | None:
        document = self._table(collection).get(key)
        if document is None:
            return None
        return with_key(collection, key, copy.deepcopy(document))

    async def put(self, collection: Collection, key: Key, document: Document) -> None:
        await self.put_many(collection, {key: document})

    async def put_many(
        self, collection: Collection, documents: Mapping[Key, Document]
    ) -> None:
        if self.fail_writes:
            raise BackendError("write failed")
        table = self._table(collection)
        for key, document in documents.items():
            table[key] = copy.deepcopy(document)
        self.writes.append((collection.name, list(documents)))

    async def delete(self, collection: Collection, key: Key) -> None:
        if self.fail_writes:
            raise BackendError("delete failed")
        self._table(collection).pop(key, None)

    async def get_all(self, collection: Collection) -> list[Document]:
        table = self._table(collection)
        return [
            with_key(collection, key, copy.deepcopy(table[key]))
            for key in sorted(table)
        ]

    async def add(self, collection: Collection, document: Document) -> int:
        if self.fail_writes:
            raise BackendError("add failed")
        key = self.counters.get(collection.name, 0) + 1
        self.counters[collection.name] = key
        self._table(collection)[key] = copy.deepcopy(document)
        return key

    async def range_descending(
        self,
        collection: Collection,
        field: str,
        upper: object,
        limit: int | None = None,
    ) -> list[Document]:
        matches = [
            (document[field], key, document)
            for key, document in self._table(collection).items()
            if document[field] <= upper
        ]
        matches.sort(key=lambda match: (match[0], match[1]), reverse=True)
        documents = [
            with_key(collection, key, copy.deepcopy(document))
            for _, key, document in matches
        ]
        return documents if limit is None else documents[:limit]

    async def close(self) -> None:
        self.closed = True


@dataclass
class FixedClock(Clock):
    """Clock frozen at a given moment."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )

    def now(self) -> datetime:
        return self.current

    def advance(self, days: int = 0, seconds: int = 0) -> None:
        self.current = self.current + timedelta(days=days, seconds=seconds)


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client returning a fixed reply."""

    reply: str = (
        '```json\n{"name": "Orange juice", "calories": 90, "protein": 1.4, '
        '"fat": 0.4, "carbs": 21, "sugar": 17, "amount": 200, "unit": "ml"}\n```'
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        prompt: str,
        image_data_urls: list[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "image_data_urls": image_data_urls,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        return self.reply


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="sqlite",
        sqlite_path=":memory:",
        openai_api_key="openai-key",
    )


@pytest.fixture
def backend() -> InMemoryDocumentBackend:
    return InMemoryDocumentBackend()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()
