"""
PostgreSQL storage backend.

Same contract as the sqlite backend, for deployments that keep the console's
container on a database server. Each collection is a table
`(id TEXT PRIMARY KEY, body JSONB)`; connections come from a psycopg
AsyncConnectionPool owned by the backend for its whole open/close lifetime.

This does not add multi-writer guarantees: the store remains a single-writer
cache whichever backend sits under it.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import psycopg
from psycopg import errors as pg_errors
from psycopg import sql
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from artisan_store.errors import DuplicateKey, StorageUnavailable, WriteFailed
from artisan_store.storage.abstract import (
    SCHEMA_META_KEY,
    AbstractStorageBackend,
    Document,
    check_collection_name,
)
from artisan_store.utils.logging import get_logger

log = get_logger(__name__)


class PostgresBackend(AbstractStorageBackend):
    """
    Keyed JSONB documents in PostgreSQL via a psycopg async pool.
    """

    name: str = "postgres"

    def __init__(
        self,
        conninfo: str,
        min_size: int = 1,
        max_size: int = 4,
        open_timeout: float = 5.0,
    ) -> None:
        self.conninfo = conninfo
        self.min_size = min_size
        self.max_size = max_size
        self.open_timeout = open_timeout
        self._pool: Optional[AsyncConnectionPool] = None

    def _require_pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise StorageUnavailable("postgres store is not open")
        return self._pool

    async def open(self) -> None:
        if self._pool is not None:
            return
        pool = AsyncConnectionPool(
            conninfo=self.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            open=False,
        )
        try:
            await pool.open(wait=True, timeout=self.open_timeout)
            async with pool.connection() as conn:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS schema_meta (
                        name TEXT PRIMARY KEY,
                        version INTEGER NOT NULL
                    )
                    """
                )
        except psycopg.Error as exc:
            await pool.close()
            raise StorageUnavailable(f"cannot open postgres store: {exc}") from exc
        self._pool = pool
        log.debug(
            "postgres store opened",
            extra={"min_size": self.min_size, "max_size": self.max_size},
        )

    async def close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            await pool.close()

    async def get_schema_version(self) -> Optional[int]:
        pool = self._require_pool()
        try:
            async with pool.connection() as conn:
                cur = await conn.execute(
                    "SELECT version FROM schema_meta WHERE name = %s", (SCHEMA_META_KEY,)
                )
                row = await cur.fetchone()
        except psycopg.Error as exc:
            raise StorageUnavailable(f"cannot read schema version: {exc}") from exc
        return int(row[0]) if row else None

    async def set_schema_version(self, version: int) -> None:
        pool = self._require_pool()
        try:
            async with pool.connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO schema_meta (name, version) VALUES (%s, %s)
                    ON CONFLICT (name) DO UPDATE SET version = EXCLUDED.version
                    """,
                    (SCHEMA_META_KEY, int(version)),
                )
        except psycopg.Error as exc:
            raise StorageUnavailable(f"cannot record schema version: {exc}") from exc

    async def create_collections(self, names: Sequence[str]) -> None:
        pool = self._require_pool()
        try:
            async with pool.connection() as conn:
                for name in names:
                    await conn.execute(
                        sql.SQL(
                            "CREATE TABLE IF NOT EXISTS {} "
                            "(id TEXT PRIMARY KEY, body JSONB NOT NULL)"
                        ).format(sql.Identifier(check_collection_name(name)))
                    )
        except psycopg.Error as exc:
            raise StorageUnavailable(f"cannot create collections: {exc}") from exc

    async def put_many(self, collection: str, documents: Sequence[Document]) -> None:
        pool = self._require_pool()
        query = sql.SQL(
            "INSERT INTO {} (id, body) VALUES (%s, %s) "
            "ON CONFLICT (id) DO UPDATE SET body = EXCLUDED.body"
        ).format(sql.Identifier(check_collection_name(collection)))
        params = [(str(doc["id"]), Jsonb(doc)) for doc in documents]
        if not params:
            return
        try:
            async with pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.executemany(query, params)
        except psycopg.Error as exc:
            raise WriteFailed(
                f"{collection}: upsert rejected: {exc}", collection=collection
            ) from exc

    async def insert(self, collection: str, document: Document) -> None:
        pool = self._require_pool()
        key = str(document["id"])
        query = sql.SQL("INSERT INTO {} (id, body) VALUES (%s, %s)").format(
            sql.Identifier(check_collection_name(collection))
        )
        try:
            async with pool.connection() as conn:
                await conn.execute(query, (key, Jsonb(document)))
        except pg_errors.UniqueViolation as exc:
            raise DuplicateKey(collection, key) from exc
        except psycopg.Error as exc:
            raise WriteFailed(
                f"{collection}: insert rejected: {exc}", collection=collection
            ) from exc

    async def fetch_all(self, collection: str) -> List[Document]:
        pool = self._require_pool()
        query = sql.SQL("SELECT body FROM {}").format(
            sql.Identifier(check_collection_name(collection))
        )
        try:
            async with pool.connection() as conn:
                cur = await conn.execute(query)
                rows = await cur.fetchall()
        except psycopg.Error as exc:
            raise StorageUnavailable(f"{collection}: read failed: {exc}") from exc
        return [body for (body,) in rows]


__all__ = ["PostgresBackend"]
