"""
In-Memory Storage Implementation

Keeps the serialized document in a dict instead of a file. Used by the
test suite and by anything that wants the service layer without a disk.
The document still goes through to_document/from_document, so the
round-trip behaviour matches the JSON file backend.
"""

import copy
from pathlib import Path
from typing import Optional

from fintrack.errors import LedgerAlreadyInitializedError, LedgerIntegrityError
from fintrack.models.ledger import Ledger
from fintrack.services.storage.interface import (
    CorruptLedgerError,
    LedgerNotFoundError,
    LedgerStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):

    def __init__(self, document: Optional[dict] = None):
        self._document = copy.deepcopy(document) if document is not None else None

    @property
    def path(self) -> Optional[Path]:
        return None

    @property
    def document(self) -> Optional[dict]:
        return copy.deepcopy(self._document)

    def exists(self) -> bool:
        return self._document is not None

    def load_document(self) -> dict:
        if self._document is None:
            raise LedgerNotFoundError()
        return copy.deepcopy(self._document)

    def load(self) -> Ledger:
        try:
            return Ledger.from_document(self.load_document())
        except LedgerIntegrityError as e:
            raise CorruptLedgerError(None, "; ".join(e.problems)) from e

    def save(self, ledger: Ledger) -> None:
        if self._document is None:
            raise LedgerNotFoundError()
        self._document = ledger.to_document()

    def create(self, ledger: Ledger) -> None:
        if self._document is not None:
            raise LedgerAlreadyInitializedError()
        self._document = ledger.to_document()

    def delete(self) -> None:
        if self._document is None:
            raise LedgerNotFoundError()
        self._document = None
