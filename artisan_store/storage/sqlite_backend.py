"""
SQLite storage backend: the default, single-file local container.

Each collection is a table `(id TEXT PRIMARY KEY, body TEXT)` holding the
record as a JSON document. The file lives at `{store_path}/{store_name}.sqlite3`
and survives process restarts, which is all the console needs from local
storage.

sqlite3 is blocking, so every call runs on a worker thread via
`asyncio.to_thread`. One connection is shared across those threads and
guarded by a lock whose wait is bounded by `lock_timeout`. A call whose
caller was cancelled before it got the lock is skipped, so a write the store
already reported as timed out cannot land later unless it was mid-statement.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from artisan_store.errors import DuplicateKey, StorageUnavailable, WriteFailed
from artisan_store.storage.abstract import (
    SCHEMA_META_KEY,
    AbstractStorageBackend,
    Document,
    check_collection_name,
)
from artisan_store.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class SqliteBackend(AbstractStorageBackend):
    """
    Keyed JSON documents in a local SQLite file.

    Parameters
    ----------
    path : Path | str
        Container file; its directory is created on open.
    lock_timeout : float
        Seconds a call waits for the connection lock, and for sqlite's own
        file lock, before failing with StorageUnavailable. Nothing is written
        when that wait runs out.
    """

    name: str = "sqlite"

    def __init__(self, path: Path | str, lock_timeout: float = 5.0) -> None:
        self.path = Path(path)
        self.lock_timeout = lock_timeout
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path, timeout=self.lock_timeout, check_same_thread=False)
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_meta (
                    name TEXT PRIMARY KEY,
                    version INTEGER NOT NULL
                )
                """
            )
            conn.commit()
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def _locked(self, abandoned: threading.Event, fn: Callable[..., T], *args: Any) -> T:
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise StorageUnavailable(
                f"sqlite store at {self.path} is busy (waited {self.lock_timeout}s)"
            )
        try:
            # The awaiting coroutine gave up while this call was queued.
            if abandoned.is_set():
                raise StorageUnavailable(f"sqlite call on {self.path} abandoned by its caller")
            if self._conn is None:
                raise StorageUnavailable(f"sqlite store at {self.path} is not open")
            return fn(self._conn, *args)
        finally:
            self._lock.release()

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        abandoned = threading.Event()
        try:
            return await asyncio.to_thread(self._locked, abandoned, fn, *args)
        except asyncio.CancelledError:
            abandoned.set()
            raise

    def _disconnect(self) -> None:
        with self._lock:
            conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    async def open(self) -> None:
        if self._conn is not None:
            return
        try:
            self._conn = await asyncio.to_thread(self._connect)
        except (sqlite3.Error, OSError) as exc:
            raise StorageUnavailable(f"cannot open sqlite store at {self.path}: {exc}") from exc
        log.debug("sqlite store opened", extra={"path": str(self.path)})

    async def close(self) -> None:
        await asyncio.to_thread(self._disconnect)

    async def get_schema_version(self) -> Optional[int]:
        def _read(conn: sqlite3.Connection) -> Optional[int]:
            row = conn.execute(
                "SELECT version FROM schema_meta WHERE name = ?", (SCHEMA_META_KEY,)
            ).fetchone()
            return int(row[0]) if row else None

        try:
            return await self._call(_read)
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"cannot read schema version: {exc}") from exc

    async def set_schema_version(self, version: int) -> None:
        def _write(conn: sqlite3.Connection) -> None:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO schema_meta (name, version) VALUES (?, ?)",
                    (SCHEMA_META_KEY, int(version)),
                )

        try:
            await self._call(_write)
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"cannot record schema version: {exc}") from exc

    async def create_collections(self, names: Sequence[str]) -> None:
        tables = [check_collection_name(n) for n in names]

        def _create(conn: sqlite3.Connection) -> None:
            with conn:
                for table in tables:
                    conn.execute(
                        f'CREATE TABLE IF NOT EXISTS "{table}" '
                        "(id TEXT PRIMARY KEY, body TEXT NOT NULL)"
                    )

        try:
            await self._call(_create)
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"cannot create collections: {exc}") from exc

    async def put_many(self, collection: str, documents: Sequence[Document]) -> None:
        table = check_collection_name(collection)
        rows = [(str(doc["id"]), json.dumps(doc)) for doc in documents]

        def _put(conn: sqlite3.Connection) -> None:
            with conn:
                conn.executemany(
                    f'INSERT OR REPLACE INTO "{table}" (id, body) VALUES (?, ?)', rows
                )

        try:
            await self._call(_put)
        except sqlite3.Error as exc:
            raise WriteFailed(
                f"{collection}: upsert rejected: {exc}", collection=collection
            ) from exc

    async def insert(self, collection: str, document: Document) -> None:
        table = check_collection_name(collection)
        key = str(document["id"])
        body = json.dumps(document)

        def _insert(conn: sqlite3.Connection) -> None:
            with conn:
                conn.execute(f'INSERT INTO "{table}" (id, body) VALUES (?, ?)', (key, body))

        try:
            await self._call(_insert)
        except sqlite3.IntegrityError as exc:
            raise DuplicateKey(collection, key) from exc
        except sqlite3.Error as exc:
            raise WriteFailed(
                f"{collection}: insert rejected: {exc}", collection=collection
            ) from exc

    async def fetch_all(self, collection: str) -> List[Document]:
        table = check_collection_name(collection)

        def _fetch(conn: sqlite3.Connection) -> List[Document]:
            return [json.loads(body) for (body,) in conn.execute(f'SELECT body FROM "{table}"')]

        try:
            return await self._call(_fetch)
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"{collection}: read failed: {exc}") from exc


__all__ = ["SqliteBackend"]
