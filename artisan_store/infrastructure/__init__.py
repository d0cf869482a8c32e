"""
Infrastructure package for the Artisan Network Store.

Centralizes storage wiring (backend selection, DSN and file paths, store
construction). Keep this layer focused on I/O and resource setup, decoupled
from domain and export logic.
"""

from artisan_store.infrastructure.db_factory import (
    available_backends,
    build_dsn,
    build_store,
    create_backend,
    sqlite_path,
)

__all__ = [
    "available_backends",
    "build_dsn",
    "build_store",
    "create_backend",
    "sqlite_path",
]
