"""Supabase document backend."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from simple_calorie.domain.errors import BackendError
from simple_calorie.services.backend import (
    Collection,
    Document,
    DocumentBackend,
    Key,
    index_values,
    with_key,
)

_logger = logging.getLogger(__name__)
_BACKEND_ERRORS = (APIError, httpx.HTTPError)


@dataclass
class SupabaseDocumentBackend(DocumentBackend):
    """Stores documents in ``key``/``body`` tables on Supabase.

    Each table holds a ``key`` primary key, a ``body`` jsonb column and one
    column per indexed field.
    """

    url: str
    service_key: str
    client: AsyncClient | None = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    async def connect(self) -> AsyncClient:
        """Create the client on first use; later calls reuse it."""
        async with self._lock:
            if self.client is None:
                self.client = await acreate_client(self.url, self.service_key)
                _logger.info("Supabase backend connected: url=%s", self.url)
        return self.client

    async def close(self) -> None:
        """Close the PostgREST session and drop the client."""
        if self.client is None:
            return
        await self.client.postgrest.aclose()
        self.client = None

    async def get(self, collection: Collection, key: Key) -> Document | None:
        """Return a document by key, if present."""
        client = await self.connect()
        try:
            response = (
                await client.table(collection.name)
                .select("key, body")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except _BACKEND_ERRORS as exc:
            raise BackendError(f"Failed to read {collection.name}") from exc
        if not response.data:
            return None
        return _parse_row(collection, response.data[0])

    async def put(self, collection: Collection, key: Key, document: Document) -> None:
        """Insert or replace a whole document."""
        await self.put_many(collection, {key: document})

    async def put_many(
        self, collection: Collection, documents: Mapping[Key, Document]
    ) -> None:
        """Upsert documents in a single request."""
        rows = [
            {"key": key, "body": document, **index_values(collection, document)}
            for key, document in documents.items()
        ]
        client = await self.connect()
        try:
            await client.table(collection.name).upsert(rows).execute()
        except _BACKEND_ERRORS as exc:
            raise BackendError(f"Failed to write {collection.name}") from exc

    async def delete(self, collection: Collection, key: Key) -> None:
        """Delete a document by key."""
        client = await self.connect()
        try:
            await client.table(collection.name).delete().eq("key", key).execute()
        except _BACKEND_ERRORS as exc:
            raise BackendError(f"Failed to delete from {collection.name}") from exc

    async def get_all(self, collection: Collection) -> list[Document]:
        """Return every document in key order."""
        client = await self.connect()
        try:
            response = (
                await client.table(collection.name)
                .select("key, body")
                .order("key")
                .execute()
            )
        except _BACKEND_ERRORS as exc:
            raise BackendError(f"Failed to read {collection.name}") from exc
        return [_parse_row(collection, row) for row in response.data or []]

    async def add(self, collection: Collection, document: Document) -> int:
        """Insert under a new identity key."""
        client = await self.connect()
        try:
            response = (
                await client.table(collection.name)
                .insert({"body": document, **index_values(collection, document)})
                .execute()
            )
        except _BACKEND_ERRORS as exc:
            raise BackendError(f"Failed to add to {collection.name}") from exc
        if not response.data:
            raise BackendError(f"No key assigned in {collection.name}")
        return int(response.data[0]["key"])

    async def range_descending(
        self,
        collection: Collection,
        field: str,
        upper: object,
        limit: int | None = None,
    ) -> list[Document]:
        """Return documents with ``field <= upper``, latest first."""
        if field not in collection.indexes:
            raise BackendError(f"{collection.name} has no index on {field}")
        client = await self.connect()
        query = (
            client.table(collection.name)
            .select("key, body")
            .lte(field, upper)
            .order(field, desc=True)
            .order("key", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        try:
            response = await query.execute()
        except _BACKEND_ERRORS as exc:
            raise BackendError(f"Failed to read {collection.name}") from exc
        return [_parse_row(collection, row) for row in response.data or []]


def _parse_row(collection: Collection, row: Mapping[str, object]) -> Document:
    """Merge a row's key into its body."""
    body = row.get("body") or {}
    key = int(row["key"]) if collection.auto_increment else str(row["key"])
    return with_key(collection, key, body)
