"""
Storage factory utilities for the Artisan Network Store.

Builds the configured storage backend and wraps it in a RecordStore. This is
the only place that reads backend settings, so callers (the CLI, tests,
embedding applications) get a ready-to-open store from a Settings object and
pass it on explicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional

from artisan_store.config import Settings, get_settings
from artisan_store.storage.abstract import StorageBackend
from artisan_store.storage.postgres_backend import PostgresBackend
from artisan_store.storage.sqlite_backend import SqliteBackend
from artisan_store.store import RecordStore


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def sqlite_path(settings: Optional[Settings] = None) -> Path:
    """Location of the sqlite container: `{store_path}/{store_name}.sqlite3`."""
    settings = settings or get_settings()
    return Path(settings.store_path) / f"{settings.store_name}.sqlite3"


def _backend_factories(settings: Settings) -> Dict[str, Callable[[], StorageBackend]]:
    """Registry of available backends."""
    return {
        # Lock waits give up inside the store-level bound, so they fail cleanly.
        "sqlite": lambda: SqliteBackend(
            sqlite_path(settings), lock_timeout=settings.store_timeout_seconds / 2
        ),
        "postgres": lambda: PostgresBackend(
            conninfo=build_dsn(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            open_timeout=settings.store_timeout_seconds,
        ),
    }


def available_backends() -> List[str]:
    """List available backend names."""
    return sorted(_backend_factories(get_settings()).keys())


def create_backend(settings: Optional[Settings] = None) -> StorageBackend:
    """
    Instantiate the backend named by `settings.store_backend`.

    Raises
    ------
    ValueError
        If the backend name is unknown.
    """
    settings = settings or get_settings()
    factories = _backend_factories(settings)
    name = settings.store_backend.lower()
    if name not in factories:
        raise ValueError(f"Unknown store backend '{name}'. Available: {', '.join(factories)}")
    return factories[name]()


def build_store(settings: Optional[Settings] = None) -> RecordStore:
    """
    Composition root for the record store: configured backend + timeout.

    The returned store is not opened yet; it opens on first use or on an
    explicit `await store.open()`.
    """
    settings = settings or get_settings()
    return RecordStore(create_backend(settings), timeout_seconds=settings.store_timeout_seconds)


__all__ = [
    "available_backends",
    "build_dsn",
    "build_store",
    "create_backend",
    "sqlite_path",
]
