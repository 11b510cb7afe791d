"""Persistence backend interface shared by the stores."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

Document = dict[str, object]
Key = str | int


@dataclass(frozen=True)
class Collection:
    """A named document collection and the fields the backend indexes."""

    name: str
    key_field: str
    auto_increment: bool = False
    indexes: tuple[str, ...] = ()


DAYS = Collection(name="days", key_field="date")
GOALS = Collection(
    name="goals", key_field="id", auto_increment=True, indexes=("start_date",)
)
FAVORITES = Collection(name="favorites", key_field="id", indexes=("sort_order",))

COLLECTIONS: tuple[Collection, ...] = (DAYS, GOALS, FAVORITES)


class DocumentBackend(Protocol):
    """Keyed document store consumed by the stores.

    Documents returned by reads always carry their key under the
    collection's ``key_field``.
    """

    async def get(self, collection: Collection, key: Key) -> Document | None:
        """Return a document by key, if present."""

    async def put(self, collection: Collection, key: Key, document: Document) -> None:
        """Insert or replace a whole document."""

    async def put_many(
        self, collection: Collection, documents: Mapping[Key, Document]
    ) -> None:
        """Insert or replace several documents in one write."""

    async def delete(self, collection: Collection, key: Key) -> None:
        """Delete a document by key; missing keys are ignored."""

    async def get_all(self, collection: Collection) -> list[Document]:
        """Return every document in key order."""

    async def add(self, collection: Collection, document: Document) -> int:
        """Store a document under a new auto-increment key and return it."""

    async def range_descending(
        self,
        collection: Collection,
        field: str,
        upper: object,
        limit: int | None = None,
    ) -> list[Document]:
        """Return documents with ``field <= upper``, newest key first on ties."""

    async def close(self) -> None:
        """Release the underlying connection."""


def index_values(collection: Collection, document: Mapping[str, object]) -> Document:
    """Extract the indexed column values of a document."""
    return {field: document.get(field) for field in collection.indexes}


def with_key(collection: Collection, key: Key, body: Mapping[str, object]) -> Document:
    """Return a copy of ``body`` carrying its key."""
    return {**body, collection.key_field: key}
