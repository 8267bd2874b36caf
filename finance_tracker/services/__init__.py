"""Services package."""

from finance_tracker.services.storage import (
    DEFAULT_CATEGORIES,
    DEFAULT_USER,
    InMemoryLedgerStorage,
    KeyedLedgerStorage,
    LedgerStorageInterface,
    LocalFileLedgerStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "DEFAULT_USER",
    "InMemoryLedgerStorage",
    "KeyedLedgerStorage",
    "LedgerStorageInterface",
    "LocalFileLedgerStorage",
    "NotFoundError",
    "StorageError",
]
