"""Tests for CSV and JSON export."""

import csv
import json
import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fintrack.models.ledger import Category, Record
from fintrack.services.export import (
    CSV_HEADERS,
    ExportError,
    ExportFileType,
    export_filename,
    export_ledger,
)

from conftest import add


WHEN = datetime(2025, 1, 31, 18, 4, 5, tzinfo=timezone.utc)


def _read_csv(path):
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.reader(fh))


class TestExportFilename:

    def test_timestamped_name(self):
        assert export_filename(ExportFileType.CSV, WHEN) == "fintrack_export_2025-01-31T18-04-05Z.csv"

    def test_default_uses_now(self):
        name = export_filename(ExportFileType.JSON)
        assert re.fullmatch(r"fintrack_export_\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}Z\.json", name)


class TestCsvExport:

    def test_rows(self, populated_ledger, tmp_path):
        """One row per record in ledger order, names resolved."""
        target = export_ledger(populated_ledger, tmp_path, ExportFileType.CSV, when=WHEN)
        assert target == tmp_path / "fintrack_export_2025-01-31T18-04-05Z.csv"

        rows = _read_csv(target)
        assert rows[0] == CSV_HEADERS
        assert rows[1:] == [
            ["1", "income", "Miscellaneous", "500", "NGN", "10-01-2025", ""],
            ["2", "income", "Salary", "300", "NGN", "01-01-2025", ""],
            ["3", "expenses", "Food", "200", "NGN", "05-01-2025", "groceries"],
        ]

    def test_description_is_escaped(self, ledger, tmp_path):
        """Commas and quotes survive; newlines become spaces."""
        ledger = add(ledger, Category.EXPENSES, "9.99", 2,
                     description='lunch, "big"\nwith friends')
        target = export_ledger(ledger, tmp_path, ExportFileType.CSV, when=WHEN)
        rows = _read_csv(target)
        assert rows[1][6] == 'lunch, "big" with friends'
        assert rows[1][3] == "9.99"

    def test_dangling_names_are_unknown(self, ledger, tmp_path):
        ledger = ledger.model_copy(deep=True)
        ledger.records.append(
            Record(id=1, category=Category.INCOME, subcategory=42,
                   amount=Decimal("1"), date="01-01-2025")
        )
        rows = _read_csv(export_ledger(ledger, tmp_path, ExportFileType.CSV, when=WHEN))
        assert rows[1][2] == "Unknown"


class TestJsonExport:

    def test_document(self, populated_ledger, tmp_path):
        target = export_ledger(populated_ledger, tmp_path, when=WHEN)
        assert target.suffix == ".json"
        assert json.loads(target.read_text(encoding="utf-8")) == populated_ledger.to_document()


class TestExportErrors:

    def test_missing_directory(self, ledger, tmp_path):
        with pytest.raises(ExportError, match="does not exist"):
            export_ledger(ledger, tmp_path / "nope")

    def test_not_a_directory(self, ledger, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        with pytest.raises(ExportError, match="not a directory"):
            export_ledger(ledger, file_path)
