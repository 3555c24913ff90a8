"""
Storage Services Package

Provides the abstract ledger storage interface and two implementations:
an in-memory arena and a JSON file store built on top of it.
"""

from financeio.services.storage.interface import (
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from financeio.services.storage.memory import InMemoryLedgerStorage
from financeio.services.storage.json_file import JsonFileLedgerStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
]
