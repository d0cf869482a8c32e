"""
Record store for the Artisan Network Store.

The store owns one storage backend and exposes three independently keyed
collections (artisans, orders, leaders). It is an explicit object: the
application builds it once (see `infrastructure.db_factory.build_store`) and
hands it to whatever needs it.

Lifecycle:

    UNINITIALIZED -> OPENING -> READY -> CLOSED
                         \
                          -> FAILED

The first operation on an UNINITIALIZED store opens it. A FAILED store
rejects every operation with StorageUnavailable until the caller invokes
`open()` again; nothing is retried automatically. Every backend call is
bounded by `timeout_seconds` and a timeout surfaces as StorageUnavailable;
for writes it is the WriteOutcomeUnknown subclass, since the engine may
still apply a write it already received.

Usage:
    store = RecordStore(SqliteBackend("data/ArtisanManagementDB.sqlite3"))
    async with store:
        await store.orders.add(order)
        mine = await store.artisans.get_all_by_field("leaderId", "1")
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import ValidationError

from artisan_store.domain.models import (
    COLLECTIONS,
    Artisan,
    Leader,
    Order,
    RecordT,
    StoredRecord,
    resolve_field_name,
)
from artisan_store.errors import (
    RecordValidationError,
    StorageUnavailable,
    StoreError,
    WriteOutcomeUnknown,
)
from artisan_store.storage.abstract import StorageBackend
from artisan_store.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

SCHEMA_VERSION = 1

SchemaUpgrade = Callable[[StorageBackend], Awaitable[None]]

# Target schema version -> hook run when an older container is opened.
# Versions without an entry only re-declare the collections.
SCHEMA_UPGRADES: Dict[int, SchemaUpgrade] = {}


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    OPENING = "opening"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class CollectionStore(Generic[RecordT]):
    """
    Operations on one collection of a RecordStore.

    Writes (`save_all`, `add`, `read_modify_write`) are serialized by a
    per-collection lock, so in-process read-modify-write sequences cannot
    interleave and drop each other's updates.
    """

    def __init__(self, store: "RecordStore", name: str, model: Type[RecordT]) -> None:
        self._store = store
        self.name = name
        self.model = model
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"CollectionStore({self.name!r}, model={self.model.__name__})"

    def _coerce(self, record: Union[RecordT, Mapping[str, Any]]) -> RecordT:
        if isinstance(record, self.model):
            return record
        if isinstance(record, Mapping):
            return self.model.validated(record)
        raise RecordValidationError(
            f"{self.name} accepts {self.model.__name__} records, got {type(record).__name__}"
        )

    def _decode(self, document: Mapping[str, Any]) -> RecordT:
        try:
            return self.model.model_validate(document)
        except ValidationError as exc:
            raise StorageUnavailable(
                f"{self.name}: stored record '{document.get('id')}' is unreadable"
            ) from exc

    async def _put(self, records: List[RecordT]) -> None:
        backend = await self._store._ready()
        if not records:
            return
        documents = [record.to_document() for record in records]
        await self._store._bounded(
            backend.put_many(self.name, documents), f"{self.name}.save_all", collection=self.name
        )
        log.debug(
            f"[SAVE] {self.name}", extra={"collection": self.name, "records": len(documents)}
        )

    async def save_all(self, records: Iterable[Union[RecordT, Mapping[str, Any]]]) -> None:
        """
        Upsert every record by id.

        Records absent from `records` are left untouched; a record whose id
        already exists is replaced wholesale (no field merge).

        Raises
        ------
        RecordValidationError
            If any record is out of domain. Nothing is written in that case.
        StorageUnavailable, WriteFailed
            On storage failures.
        """
        items = [self._coerce(record) for record in records]
        async with self._lock:
            await self._put(items)

    async def add(self, record: Union[RecordT, Mapping[str, Any]]) -> None:
        """
        Insert exactly one new record.

        Raises
        ------
        DuplicateKey
            If the id is already present; the stored record is left unchanged.
        RecordValidationError, StorageUnavailable, WriteFailed
        """
        item = self._coerce(record)
        async with self._lock:
            backend = await self._store._ready()
            await self._store._bounded(
                backend.insert(self.name, item.to_document()),
                f"{self.name}.add",
                collection=self.name,
            )
        log.debug(f"[ADD] {self.name}", extra={"collection": self.name, "key": item.id})

    async def get_all(self) -> List[RecordT]:
        """Every record in the collection. Ordering is not guaranteed."""
        backend = await self._store._ready()
        documents = await self._store._bounded(
            backend.fetch_all(self.name), f"{self.name}.get_all"
        )
        return [self._decode(document) for document in documents]

    async def get_all_by_field(self, field_name: str, value: Any) -> List[RecordT]:
        """
        Records whose `field_name` equals `value`.

        Filtering happens in memory after `get_all()`. `field_name` may be the
        attribute name or its camelCase key (`leader_id` / `leaderId`).
        """
        attribute = resolve_field_name(self.model, field_name)
        return [record for record in await self.get_all() if getattr(record, attribute) == value]

    async def read_modify_write(
        self, transform: Callable[[List[RecordT]], Iterable[Union[RecordT, Mapping[str, Any]]]]
    ) -> List[RecordT]:
        """
        Read the whole collection, apply `transform`, upsert what it returns.

        Holds the collection lock for the whole sequence. Returns the records
        that were written.
        """
        async with self._lock:
            current = await self.get_all()
            updated = [self._coerce(record) for record in transform(current)]
            await self._put(updated)
        return updated


class RecordStore:
    """
    Versioned local container with the artisans, orders and leaders collections.

    Parameters
    ----------
    backend : StorageBackend
        Engine holding the container (sqlite file, PostgreSQL).
    timeout_seconds : float
        Upper bound for every backend call, opening included.
    schema_version : int
        Version this code expects; older containers are upgraded through
        `upgrades`, newer ones are refused.
    upgrades : mapping[int, SchemaUpgrade] | None
        Per-version upgrade hooks. Defaults to SCHEMA_UPGRADES.
    """

    def __init__(
        self,
        backend: StorageBackend,
        timeout_seconds: float = 5.0,
        schema_version: int = SCHEMA_VERSION,
        upgrades: Optional[Mapping[int, SchemaUpgrade]] = None,
    ) -> None:
        self.backend = backend
        self.timeout_seconds = timeout_seconds
        self.schema_version = schema_version
        self.upgrades = dict(SCHEMA_UPGRADES if upgrades is None else upgrades)
        self.state = StoreState.UNINITIALIZED
        self._open_lock = asyncio.Lock()
        self._failure: Optional[BaseException] = None

        self.artisans: CollectionStore[Artisan] = CollectionStore(self, "artisans", Artisan)
        self.orders: CollectionStore[Order] = CollectionStore(self, "orders", Order)
        self.leaders: CollectionStore[Leader] = CollectionStore(self, "leaders", Leader)
        self._collections: Dict[str, CollectionStore[Any]] = {
            "artisans": self.artisans,
            "orders": self.orders,
            "leaders": self.leaders,
        }

    def collection(self, name: str) -> CollectionStore[Any]:
        """Look up a collection by name ("artisans", "orders", "leaders")."""
        try:
            return self._collections[name]
        except KeyError:
            raise ValueError(
                f"Unknown collection '{name}'. Available: {', '.join(self._collections)}"
            ) from None

    async def __aenter__(self) -> "RecordStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        """
        Open the container, declaring or upgrading the schema as needed.

        Calling open() on a FAILED or CLOSED store tries again; calling it on a
        READY store does nothing.
        """
        async with self._open_lock:
            if self.state is StoreState.READY:
                return
            self.state = StoreState.OPENING
            try:
                await self._bounded(self._open_container(), "open")
            except Exception as exc:  # noqa: BLE001 - any open failure leaves the store FAILED
                self.state = StoreState.FAILED
                self._failure = exc
                await self._release_backend()
                if isinstance(exc, StorageUnavailable):
                    raise
                raise StorageUnavailable(f"cannot open store: {exc}") from exc
            self.state = StoreState.READY
            self._failure = None
        log.info(
            "[STORE OPEN] ready",
            extra={"backend": self.backend.name, "schema_version": self.schema_version},
        )

    async def _open_container(self) -> None:
        backend = self.backend
        names = list(COLLECTIONS)
        await backend.open()
        stored = await backend.get_schema_version()

        if stored is None:
            await backend.create_collections(names)
            await backend.set_schema_version(self.schema_version)
            log.info(
                "[STORE CREATE] collections declared",
                extra={"collections": names, "schema_version": self.schema_version},
            )
        elif stored < self.schema_version:
            for version in range(stored + 1, self.schema_version + 1):
                hook = self.upgrades.get(version)
                if hook is not None:
                    await hook(backend)
                log.info(
                    f"[STORE UPGRADE] v{version - 1} -> v{version}",
                    extra={"schema_version": version},
                )
            await backend.create_collections(names)
            await backend.set_schema_version(self.schema_version)
        elif stored > self.schema_version:
            raise StorageUnavailable(
                f"container schema v{stored} is newer than supported v{self.schema_version}"
            )

    async def close(self) -> None:
        """Release the backend. Later operations fail until open() is called."""
        async with self._open_lock:
            await self._release_backend()
            self.state = StoreState.CLOSED
        log.info("[STORE CLOSED]", extra={"backend": self.backend.name})

    async def _release_backend(self) -> None:
        try:
            await self.backend.close()
        except (StoreError, OSError):
            log.warning("[STORE CLOSE] backend did not close cleanly", exc_info=True)

    async def _ready(self) -> StorageBackend:
        if self.state is StoreState.UNINITIALIZED:
            await self.open()
        elif self.state is StoreState.OPENING:
            # Another caller is opening; wait for its outcome.
            async with self._open_lock:
                pass

        if self.state is StoreState.READY:
            return self.backend
        if self.state is StoreState.FAILED:
            raise StorageUnavailable(f"store failed to open: {self._failure}") from self._failure
        raise StorageUnavailable(f"store is {self.state.value}")

    async def _bounded(
        self, operation: Awaitable[T], label: str, collection: Optional[str] = None
    ) -> T:
        """
        Await `operation` for at most `timeout_seconds`.

        `collection` marks a write: a write that times out raises
        WriteOutcomeUnknown, since the engine may already be applying it.
        """
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            log.error(
                f"[STORE TIMEOUT] {label}",
                extra={"operation": label, "timeout_seconds": self.timeout_seconds},
            )
            if collection is not None:
                raise WriteOutcomeUnknown(
                    f"{label} timed out after {self.timeout_seconds}s; "
                    "the write may still be applied",
                    collection=collection,
                ) from exc
            raise StorageUnavailable(
                f"{label} timed out after {self.timeout_seconds}s"
            ) from exc
        except StoreError as exc:
            log.warning(
                f"[STORE FAILED] {label}",
                extra={"operation": label, "error": str(exc), "error_type": type(exc).__name__},
            )
            raise


__all__ = [
    "CollectionStore",
    "RecordStore",
    "SCHEMA_UPGRADES",
    "SCHEMA_VERSION",
    "SchemaUpgrade",
    "StoreState",
]
