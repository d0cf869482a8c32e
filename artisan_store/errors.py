"""
Error taxonomy for the Artisan Network Store.

Every failure surfaces to the immediate caller as one of these exceptions.
Nothing is retried by the store or the exporter; callers decide whether a
user-initiated action is worth repeating.
"""

from __future__ import annotations

from typing import Any, List, Optional


class StoreError(Exception):
    """Base class for all record store and export failures."""


class StorageUnavailable(StoreError):
    """The storage container could not be opened, is closed, or timed out."""


class WriteFailed(StoreError):
    """The storage engine rejected a put or add."""

    def __init__(self, message: str, collection: Optional[str] = None) -> None:
        super().__init__(message)
        self.collection = collection


class DuplicateKey(WriteFailed):
    """An insert-only add targeted a key that already exists."""

    def __init__(self, collection: str, key: str) -> None:
        super().__init__(f"{collection}: record '{key}' already exists", collection=collection)
        self.key = key


class WriteOutcomeUnknown(StorageUnavailable):
    """
    A write timed out after it was handed to the storage engine.

    The engine may still apply it. Reads that follow go through the same
    engine, so `get_all()` shows whether it landed.
    """

    def __init__(self, message: str, collection: Optional[str] = None) -> None:
        super().__init__(message)
        self.collection = collection


class DownloadUnsupported(StoreError):
    """The exporter has nowhere to save the file."""


class RecordValidationError(StoreError, ValueError):
    """
    A record carried out-of-domain values.

    `errors` holds pydantic's structured error list when the failure came from
    model validation.
    """

    def __init__(self, message: str, errors: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class RecordNotFound(StoreError, LookupError):
    """A workflow addressed an id that is not in the collection."""

    def __init__(self, collection: str, key: str) -> None:
        super().__init__(f"{collection}: no record with id '{key}'")
        self.collection = collection
        self.key = key


__all__ = [
    "StoreError",
    "StorageUnavailable",
    "WriteFailed",
    "DuplicateKey",
    "WriteOutcomeUnknown",
    "DownloadUnsupported",
    "RecordValidationError",
    "RecordNotFound",
]
