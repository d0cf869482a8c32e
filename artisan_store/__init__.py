"""
Artisan Network Store - persistence and export core of the artisan management console.

This package keeps the console's three record collections in a local,
versioned container and turns derived views into CSV reports:

- Record store with artisans, orders and leaders collections
  (bulk upsert, insert-only add, read-all, single-field filtering)
- Pluggable storage backends (local sqlite file, PostgreSQL)
- Validating record models for every collection
- Tabular (CSV) exporter and report projections
- Order and artisan workflows used by the dashboards
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from artisan_store.config import Settings, get_settings
from artisan_store.domain.models import Artisan, Leader, Order
from artisan_store.errors import (
    DownloadUnsupported,
    DuplicateKey,
    RecordNotFound,
    RecordValidationError,
    StorageUnavailable,
    StoreError,
    WriteFailed,
    WriteOutcomeUnknown,
)
from artisan_store.exporter import TabularExporter, export_filename
from artisan_store.infrastructure.db_factory import build_store
from artisan_store.store import CollectionStore, RecordStore, StoreState
from artisan_store.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "Artisan",
    "Leader",
    "Order",
    # Store
    "CollectionStore",
    "RecordStore",
    "StoreState",
    "build_store",
    # Export
    "TabularExporter",
    "export_filename",
    # Errors
    "DownloadUnsupported",
    "DuplicateKey",
    "RecordNotFound",
    "RecordValidationError",
    "StorageUnavailable",
    "StoreError",
    "WriteFailed",
    "WriteOutcomeUnknown",
    # Logging
    "configure_logging",
    "get_logger",
]
