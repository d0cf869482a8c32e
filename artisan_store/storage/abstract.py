"""
Storage backend interfaces for the Artisan Network Store.

A backend is the engine under the record store: it owns the physical
container, keeps one table per collection keyed by `id`, and moves JSON
documents in and out. Concrete backends (sqlite file, PostgreSQL) implement
the StorageBackend protocol and translate their driver errors into the
store's error taxonomy so the store never sees driver exceptions.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

Document = Dict[str, Any]

# Key of the row in `schema_meta` that records the collection schema version.
SCHEMA_META_KEY = "collections"


@runtime_checkable
class StorageBackend(Protocol):
    """
    Common interface all storage backends must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.

    Error contract
    --------------
    - `open`, `fetch_all` and the schema methods raise StorageUnavailable.
    - `put_many` raises WriteFailed.
    - `insert` raises DuplicateKey for an existing id, WriteFailed otherwise.
    """

    name: str

    async def open(self) -> None:
        """Open (and create if missing) the underlying container."""
        ...

    async def close(self) -> None:
        """Release the container. Safe to call more than once."""
        ...

    async def get_schema_version(self) -> Optional[int]:
        """Return the recorded schema version, or None for a fresh container."""
        ...

    async def set_schema_version(self, version: int) -> None:
        ...

    async def create_collections(self, names: Sequence[str]) -> None:
        """Declare one keyed table per collection name (idempotent)."""
        ...

    async def put_many(self, collection: str, documents: Sequence[Document]) -> None:
        """Upsert every document by its `id`, fully replacing stored bodies."""
        ...

    async def insert(self, collection: str, document: Document) -> None:
        """Insert one document; an existing `id` is an error."""
        ...

    async def fetch_all(self, collection: str) -> List[Document]:
        """Return every stored document of the collection, in no set order."""
        ...


class AbstractStorageBackend(abc.ABC):
    """
    Optional ABC helper for class-based backends.

    Subclasses set `name` and implement every coroutine of the protocol.
    """

    name: str

    @abc.abstractmethod
    async def open(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def get_schema_version(self) -> Optional[int]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def set_schema_version(self, version: int) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def create_collections(self, names: Sequence[str]) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def put_many(self, collection: str, documents: Sequence[Document]) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def insert(self, collection: str, document: Document) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_all(self, collection: str) -> List[Document]:  # pragma: no cover
        raise NotImplementedError


def check_collection_name(name: str) -> str:
    """
    Guard table names interpolated into SQL: plain identifiers only.
    """
    if not name.isidentifier():
        raise ValueError(f"invalid collection name: {name!r}")
    return name


__all__ = [
    "AbstractStorageBackend",
    "Document",
    "SCHEMA_META_KEY",
    "StorageBackend",
    "check_collection_name",
]
