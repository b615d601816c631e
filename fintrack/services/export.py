"""
Ledger Export

Writes a snapshot of the ledger to a user-chosen directory as CSV (one row
per record, names resolved) or JSON (the document itself, pretty-printed).

File names carry a UTC timestamp so repeated exports never overwrite each
other: fintrack_export_2025-01-31T18-04-05Z.csv
"""

import csv
import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from fintrack.models.ledger import Ledger
from fintrack.utils.dates import EXPORT_TIMESTAMP_FORMAT, utc_now


EXPORT_FILE_PREFIX = "fintrack_export_"
CSV_HEADERS = ["ID", "Category", "Subcategory", "Amount", "Currency", "Date", "Description"]
UNKNOWN_NAME = "Unknown"


class ExportFileType(str, Enum):
    CSV = "csv"
    JSON = "json"

    @property
    def extension(self) -> str:
        return self.value


class ExportError(Exception):
    """The export target is unusable or the file could not be written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


def export_filename(file_type: ExportFileType, when: Optional[datetime] = None) -> str:
    stamp = (when or utc_now()).strftime(EXPORT_TIMESTAMP_FORMAT)
    return f"{EXPORT_FILE_PREFIX}{stamp}.{file_type.extension}"


def _flatten(text: str) -> str:
    return text.replace("\r", " ").replace("\n", " ")


def _write_csv(ledger: Ledger, target: Path) -> None:
    # newline='' so the csv module controls line endings
    with target.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(CSV_HEADERS)
        for record in ledger.records:
            writer.writerow([
                record.id,
                ledger.category_name(record.category) or UNKNOWN_NAME,
                ledger.subcategory_name(record.subcategory) or UNKNOWN_NAME,
                str(record.amount),
                ledger.currency.value,
                record.date,
                _flatten(record.description),
            ])


def _write_json(ledger: Ledger, target: Path, indent: int) -> None:
    with target.open("w", encoding="utf-8") as fh:
        json.dump(ledger.to_document(), fh, indent=indent, ensure_ascii=False)


def export_ledger(
    ledger: Ledger,
    directory: Path,
    file_type: ExportFileType = ExportFileType.JSON,
    when: Optional[datetime] = None,
    indent: int = 2,
) -> Path:
    """
    Export the ledger into directory and return the written file's path.

    Raises:
        ExportError: directory missing, not a directory, or not writable
    """
    directory = Path(directory)
    if not directory.exists():
        raise ExportError(f"Path does not exist: {directory}", directory)
    if not directory.is_dir():
        raise ExportError(f"Path is not a directory: {directory}", directory)

    target = directory / export_filename(file_type, when)
    try:
        if file_type == ExportFileType.CSV:
            _write_csv(ledger, target)
        else:
            _write_json(ledger, target, indent)
    except OSError as e:
        raise ExportError(f"Failed to write {target}: {e}", target) from e
    return target
