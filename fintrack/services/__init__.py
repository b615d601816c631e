"""
Services Package

Collaborators around the ledger core:
- storage: Persisting the ledger document
- export: CSV / JSON snapshots of the ledger
"""

from fintrack.services.export import ExportError, ExportFileType, export_ledger
from fintrack.services.storage import (
    CorruptLedgerError,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    LedgerNotFoundError,
    LedgerStorageInterface,
    StorageError,
    StoragePermissionError,
)

__all__ = [
    # Export
    "ExportError",
    "ExportFileType",
    "export_ledger",
    # Storage
    "CorruptLedgerError",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "LedgerNotFoundError",
    "LedgerStorageInterface",
    "StorageError",
    "StoragePermissionError",
]
