"""
Storage package for the Artisan Network Store.

Re-exports the backend interface and the concrete backends so the store and
the composition root can import from `artisan_store.storage` directly.
"""

from artisan_store.storage.abstract import (
    AbstractStorageBackend,
    Document,
    StorageBackend,
)
from artisan_store.storage.postgres_backend import PostgresBackend
from artisan_store.storage.sqlite_backend import SqliteBackend

__all__ = [
    # Abstracts
    "AbstractStorageBackend",
    "Document",
    "StorageBackend",
    # Concrete backends
    "PostgresBackend",
    "SqliteBackend",
]
