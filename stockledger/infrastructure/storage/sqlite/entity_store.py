"""SQLite implementation of the entity store."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities import Movement
from stockledger.core.exceptions import DatabaseError, UnknownIndexError
from stockledger.core.interfaces.storage import (
    ENTITY_TYPES,
    INDEXES,
    Collection,
    Entity,
    IEntityStore,
    IStoreSession,
)
from stockledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)


def _to_db_value(value: Any) -> Any:
    """Convert a Python value to its stored column form."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _entity_to_row(entity: Entity) -> dict[str, Any]:
    """Flatten an entity into column -> value."""
    data = entity.model_dump()
    if isinstance(entity, Movement):
        snapshot = data.pop("product_snapshot")
        data["snapshot_name"] = snapshot["name"]
        data["snapshot_category"] = snapshot["category"]
    return {column: _to_db_value(value) for column, value in data.items()}


def _row_to_entity(collection: Collection, row: aiosqlite.Row) -> Entity:
    """Convert a database row to its entity."""
    data = dict(row)
    if collection == Collection.MOVEMENTS:
        data["product_snapshot"] = {
            "name": data.pop("snapshot_name"),
            "category": data.pop("snapshot_category"),
        }
    return ENTITY_TYPES[collection].model_validate(data)


def _index_column(collection: Collection, index_name: str) -> str:
    try:
        return INDEXES[collection][index_name]
    except KeyError:
        raise UnknownIndexError(collection.value, index_name) from None


def _check_type(collection: Collection, entity: Entity) -> None:
    expected = ENTITY_TYPES[collection]
    if not isinstance(entity, expected):
        raise TypeError(
            f"{collection.value} expects {expected.__name__}, got {type(entity).__name__}"
        )


class SQLiteStoreSession(IStoreSession):
    """
    Store operations bound to one aiosqlite connection.

    Opened by SQLiteEntityStore.transaction(); reads made here see the
    uncommitted writes of the same transaction.
    """

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def _fetchall(self, operation: str, sql: str, params: tuple = ()) -> list:
        try:
            cursor = await self._conn.execute(sql, params)
            return await cursor.fetchall()
        except aiosqlite.Error as e:
            raise DatabaseError(operation, str(e)) from e

    async def _execute(self, operation: str, sql: str, params: tuple = ()) -> None:
        try:
            await self._conn.execute(sql, params)
        except aiosqlite.Error as e:
            raise DatabaseError(operation, str(e)) from e

    async def get(self, collection: Collection, entity_id: str) -> Entity | None:
        rows = await self._fetchall(
            "get",
            f"SELECT * FROM {collection.value} WHERE id = ?",
            (entity_id,),
        )
        if not rows:
            return None
        return _row_to_entity(collection, rows[0])

    async def get_all(self, collection: Collection) -> list[Entity]:
        rows = await self._fetchall("get_all", f"SELECT * FROM {collection.value}")
        return [_row_to_entity(collection, row) for row in rows]

    async def get_by_index(
        self, collection: Collection, index_name: str, value: Any
    ) -> list[Entity]:
        column = _index_column(collection, index_name)
        rows = await self._fetchall(
            "get_by_index",
            f"SELECT * FROM {collection.value} WHERE {column} = ?",
            (_to_db_value(value),),
        )
        return [_row_to_entity(collection, row) for row in rows]

    async def put(self, collection: Collection, entity: Entity) -> Entity:
        _check_type(collection, entity)
        row = _entity_to_row(entity)
        columns = list(row)
        # Upsert instead of INSERT OR REPLACE: REPLACE deletes the old row
        # and would cascade to a product's photos.
        updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "id")
        sql = (
            f"INSERT INTO {collection.value} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}"
        )
        await self._execute("put", sql, tuple(row.values()))
        return entity

    async def delete(self, collection: Collection, entity_id: str) -> None:
        await self._execute(
            "delete",
            f"DELETE FROM {collection.value} WHERE id = ?",
            (entity_id,),
        )

    async def clear(self, collection: Collection) -> None:
        await self._execute("clear", f"DELETE FROM {collection.value}")

    async def count(self, collection: Collection) -> int:
        rows = await self._fetchall("count", f"SELECT COUNT(*) FROM {collection.value}")
        return rows[0][0]


class SQLiteEntityStore(IEntityStore):
    """SQLite implementation of product, movement and photo storage."""

    async def get(self, collection: Collection, entity_id: str) -> Entity | None:
        async with get_connection() as conn:
            return await SQLiteStoreSession(conn).get(collection, entity_id)

    async def get_all(self, collection: Collection) -> list[Entity]:
        async with get_connection() as conn:
            return await SQLiteStoreSession(conn).get_all(collection)

    async def get_by_index(
        self, collection: Collection, index_name: str, value: Any
    ) -> list[Entity]:
        async with get_connection() as conn:
            return await SQLiteStoreSession(conn).get_by_index(
                collection, index_name, value
            )

    async def put(self, collection: Collection, entity: Entity) -> Entity:
        async with self.transaction() as session:
            await session.put(collection, entity)
        logger.debug("entity_saved", collection=collection.value, entity_id=entity.id)
        return entity

    async def delete(self, collection: Collection, entity_id: str) -> None:
        async with self.transaction() as session:
            await session.delete(collection, entity_id)
        logger.debug("entity_deleted", collection=collection.value, entity_id=entity_id)

    async def count(self, collection: Collection) -> int:
        async with get_connection() as conn:
            return await SQLiteStoreSession(conn).count(collection)

    async def delete_product(self, product_id: str) -> None:
        async with self.transaction() as session:
            photos = await session.get_by_index(
                Collection.PHOTOS, "by-product", product_id
            )
            for photo in photos:
                await session.delete(Collection.PHOTOS, photo.id)
            await session.delete(Collection.PRODUCTS, product_id)
        logger.info(
            "product_deleted",
            product_id=product_id,
            photos_deleted=len(photos),
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLiteStoreSession]:
        async with get_transaction() as conn:
            yield SQLiteStoreSession(conn)


__all__ = ["SQLiteEntityStore", "SQLiteStoreSession"]
