"""
Storage Services Package

Provides the abstract ledger storage interface and its implementations.
The JSON file backend is the default; the in-memory one backs the tests.
"""

from fintrack.services.storage.interface import (
    CorruptLedgerError,
    LedgerNotFoundError,
    LedgerStorageInterface,
    StorageError,
    StoragePermissionError,
)
from fintrack.services.storage.json_file import JsonFileLedgerStorage
from fintrack.services.storage.memory import InMemoryLedgerStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "CorruptLedgerError",
    "LedgerNotFoundError",
    "StorageError",
    "StoragePermissionError",
    # Implementations
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
]
