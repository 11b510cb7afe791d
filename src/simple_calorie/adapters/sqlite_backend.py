"""SQLite document backend for local persistence."""

import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import aiosqlite

from simple_calorie.domain.errors import BackendError
from simple_calorie.services.backend import (
    COLLECTIONS,
    Collection,
    Document,
    DocumentBackend,
    Key,
    index_values,
    with_key,
)

_logger = logging.getLogger(__name__)


@dataclass
class SqliteDocumentBackend(DocumentBackend):
    """Stores each collection as a table of JSON bodies.

    The connection is opened lazily on first use and reused afterwards.
    """

    path: str
    collections: tuple[Collection, ...] = COLLECTIONS
    _connection: aiosqlite.Connection | None = field(default=None, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    async def connect(self) -> aiosqlite.Connection:
        """Open the database and create tables; later calls reuse it."""
        async with self._lock:
            if self._connection is None:
                try:
                    connection = await aiosqlite.connect(self.path)
                    await _create_schema(connection, self.collections)
                except aiosqlite.Error as exc:
                    raise BackendError(f"Failed to open {self.path}") from exc
                _logger.info("SQLite backend connected: path=%s", self.path)
                self._connection = connection
        return self._connection

    async def close(self) -> None:
        """Close the connection if it was opened."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def get(self, collection: Collection, key: Key) -> Document | None:
        """Return a document by key, if present."""
        rows = await self._fetch(
            f"SELECT key, body FROM {collection.name} WHERE key = ?", (key,)
        )
        if not rows:
            return None
        return _row_to_document(collection, rows[0])

    async def put(self, collection: Collection, key: Key, document: Document) -> None:
        """Insert or replace a whole document."""
        await self.put_many(collection, {key: document})

    async def put_many(
        self, collection: Collection, documents: Mapping[Key, Document]
    ) -> None:
        """Insert or replace documents inside one transaction."""
        columns = ("key", "body", *collection.indexes)
        placeholders = ", ".join("?" for _ in columns)
        sql = (
            f"INSERT OR REPLACE INTO {collection.name} ({', '.join(columns)}) "
            f"VALUES ({placeholders})"
        )
        params = [
            (key, _dump(document), *index_values(collection, document).values())
            for key, document in documents.items()
        ]
        connection = await self.connect()
        try:
            await connection.executemany(sql, params)
            await connection.commit()
        except aiosqlite.Error as exc:
            await connection.rollback()
            raise BackendError(f"Failed to write {collection.name}") from exc

    async def delete(self, collection: Collection, key: Key) -> None:
        """Delete a document by key."""
        connection = await self.connect()
        try:
            await connection.execute(
                f"DELETE FROM {collection.name} WHERE key = ?", (key,)
            )
            await connection.commit()
        except aiosqlite.Error as exc:
            raise BackendError(f"Failed to delete from {collection.name}") from exc

    async def get_all(self, collection: Collection) -> list[Document]:
        """Return every document in key order."""
        rows = await self._fetch(
            f"SELECT key, body FROM {collection.name} ORDER BY key", ()
        )
        return [_row_to_document(collection, row) for row in rows]

    async def add(self, collection: Collection, document: Document) -> int:
        """Insert under a new auto-increment key."""
        columns = ("body", *collection.indexes)
        placeholders = ", ".join("?" for _ in columns)
        connection = await self.connect()
        try:
            cursor = await connection.execute(
                f"INSERT INTO {collection.name} ({', '.join(columns)}) "
                f"VALUES ({placeholders})",
                (_dump(document), *index_values(collection, document).values()),
            )
            await connection.commit()
        except aiosqlite.Error as exc:
            raise BackendError(f"Failed to add to {collection.name}") from exc
        if cursor.lastrowid is None:
            raise BackendError(f"No key assigned in {collection.name}")
        return int(cursor.lastrowid)

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
        sql = (
            f"SELECT key, body FROM {collection.name} WHERE {field} <= ? "
            f"ORDER BY {field} DESC, key DESC"
        )
        params: tuple[object, ...] = (upper,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (upper, limit)
        rows = await self._fetch(sql, params)
        return [_row_to_document(collection, row) for row in rows]

    async def _fetch(
        self, sql: str, params: tuple[object, ...]
    ) -> list[tuple[object, str]]:
        connection = await self.connect()
        try:
            async with connection.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise BackendError("Failed to read from SQLite") from exc
        return [(row[0], row[1]) for row in rows]


async def _create_schema(
    connection: aiosqlite.Connection, collections: tuple[Collection, ...]
) -> None:
    for collection in collections:
        key_type = (
            "INTEGER PRIMARY KEY AUTOINCREMENT"
            if collection.auto_increment
            else "TEXT PRIMARY KEY"
        )
        index_columns = "".join(f", {name}" for name in collection.indexes)
        await connection.execute(
            f"CREATE TABLE IF NOT EXISTS {collection.name} "
            f"(key {key_type}, body TEXT NOT NULL{index_columns})"
        )
        for name in collection.indexes:
            await connection.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{collection.name}_{name} "
                f"ON {collection.name} ({name}, key)"
            )
    await connection.commit()


def _dump(document: Document) -> str:
    return json.dumps(document, ensure_ascii=False)


def _row_to_document(collection: Collection, row: tuple[object, str]) -> Document:
    key = row[0]
    if not collection.auto_increment:
        key = str(key)
    return with_key(collection, key, json.loads(row[1]))
