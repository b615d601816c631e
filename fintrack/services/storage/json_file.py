"""
JSON File Storage Implementation

DESIGN DECISION: The ledger lives in one pretty-printed JSON file because:
1. Users can read (and back up) their data with any text editor
2. No database setup required
3. A whole-document rewrite is cheap at personal-ledger sizes

TRADEOFFS:
- Every save rewrites the whole file (fine for thousands of records)
- No multi-writer coordination (one command runs at a time)

Writes go to a temporary file in the same directory which is then
os.replace'd over the document, so a crash mid-write never leaves a
truncated ledger behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fintrack.config import get_settings
from fintrack.errors import LedgerAlreadyInitializedError, LedgerIntegrityError
from fintrack.models.ledger import Ledger
from fintrack.services.storage.interface import (
    CorruptLedgerError,
    LedgerNotFoundError,
    LedgerStorageInterface,
    StorageError,
    StoragePermissionError,
)


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    Ledger storage backed by a single JSON file.

    The file is opened fresh on every call; nothing is cached between
    calls, so each command invocation sees what is on disk.
    """

    def __init__(self, path: Optional[Path] = None, indent: Optional[int] = None):
        settings = get_settings().ledger
        self._path = Path(path) if path is not None else settings.tracker_path
        self._indent = settings.json_indent if indent is None else indent

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load_document(self) -> dict:
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            raise LedgerNotFoundError(self._path) from None
        except PermissionError as e:
            raise StoragePermissionError(self._path, str(e)) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptLedgerError(self._path, f"invalid JSON: {e}") from e
        except IsADirectoryError as e:
            raise CorruptLedgerError(self._path, "path is a directory") from e

    def load(self) -> Ledger:
        document = self.load_document()
        try:
            return Ledger.from_document(document)
        except LedgerIntegrityError as e:
            raise CorruptLedgerError(self._path, "; ".join(e.problems)) from e

    def save(self, ledger: Ledger) -> None:
        if not self.exists():
            raise LedgerNotFoundError(self._path)
        self._write(ledger.to_document())

    def create(self, ledger: Ledger) -> None:
        if self.exists():
            raise LedgerAlreadyInitializedError(self._path)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise StoragePermissionError(self._path.parent, str(e)) from e
        self._write(ledger.to_document())

    def delete(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            raise LedgerNotFoundError(self._path) from None
        except PermissionError as e:
            raise StoragePermissionError(self._path, str(e)) from e

    def dumps(self, document: dict) -> str:
        """Serialize a document exactly as it is written to disk."""
        return json.dumps(document, indent=self._indent, ensure_ascii=False)

    def _write(self, document: dict) -> None:
        try:
            self._replace_atomically(self.dumps(document))
        except PermissionError as e:
            raise StoragePermissionError(self._path, str(e)) from e
        except OSError as e:
            raise StorageError(f"Failed to write ledger to {self._path}: {e}") from e

    @retry(
        retry=retry_if_exception_type((BlockingIOError, InterruptedError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _replace_atomically(self, payload: str) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
