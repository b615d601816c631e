"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger persistence.
This allows us to:
1. Keep the ledger core free of any file handling
2. Use in-memory storage for testing
3. Swap the JSON file for another backend later

The contract is load-then-replace: one whole document in, one whole
document out. There is no incremental patching and no locking beyond
what a single writer needs.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from fintrack.models.ledger import Ledger


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation must implement these methods.
    """

    @property
    @abstractmethod
    def path(self) -> Optional[Path]:
        """Where the document lives, if it lives in a file."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Return True if a ledger document is present."""
        pass

    @abstractmethod
    def load(self) -> Ledger:
        """
        Read and validate the ledger.

        Raises:
            LedgerNotFoundError: no document
            CorruptLedgerError: document is not valid JSON or breaks an invariant
            StoragePermissionError: document cannot be read
        """
        pass

    @abstractmethod
    def load_document(self) -> dict:
        """
        Read the raw JSON document without building a Ledger.

        Raises:
            Same as load, except invariant violations are not checked.
        """
        pass

    @abstractmethod
    def save(self, ledger: Ledger) -> None:
        """
        Replace the whole document with this ledger.

        Raises:
            LedgerNotFoundError: no document to replace
            StorageError: write failed
        """
        pass

    @abstractmethod
    def create(self, ledger: Ledger) -> None:
        """
        Write a brand new document.

        Raises:
            LedgerAlreadyInitializedError: a document already exists
            StorageError: write failed
        """
        pass

    @abstractmethod
    def delete(self) -> None:
        """
        Remove the document entirely.

        Raises:
            LedgerNotFoundError: nothing to remove
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class LedgerNotFoundError(StorageError):
    """No ledger document; run `fintrack init` first."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(
            f"No ledger found{where}. Run 'fintrack init' to create one."
        )


class CorruptLedgerError(StorageError):
    """The document exists but is not a valid ledger."""

    def __init__(self, path: Optional[Path], reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Ledger at {path} is malformed: {reason}")


class StoragePermissionError(StorageError):
    """The document cannot be read or written."""

    def __init__(self, path: Optional[Path], reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Permission denied for {path}: {reason}")
