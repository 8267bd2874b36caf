"""
Storage Services Package

Provides the abstract ledger storage interface and its two implementations:
process memory (server) and a device-local JSON file (offline mirror).
"""

from finance_tracker.services.storage.interface import (
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from finance_tracker.services.storage.base import (
    DEFAULT_CATEGORIES,
    DEFAULT_USER,
    KeyedLedgerStorage,
)
from finance_tracker.services.storage.memory import InMemoryLedgerStorage
from finance_tracker.services.storage.local_file import LocalFileLedgerStorage

__all__ = [
    # Interfaces
    "LedgerStorageInterface",
    "KeyedLedgerStorage",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # Seed data
    "DEFAULT_CATEGORIES",
    "DEFAULT_USER",
    # Implementations
    "InMemoryLedgerStorage",
    "LocalFileLedgerStorage",
]
