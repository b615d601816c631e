"""Tests for the click command line."""

import json
from decimal import Decimal

import pytest
from click.testing import CliRunner

from fintrack.cli import fmt_money, main
from fintrack.orchestrator import LedgerService
from fintrack.services.storage import InMemoryLedgerStorage


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_service():
    return LedgerService(storage=InMemoryLedgerStorage())


@pytest.fixture
def invoke(runner, cli_service):
    def _invoke(*args, **kwargs):
        return runner.invoke(main, list(args), obj=cli_service, **kwargs)
    return _invoke


@pytest.fixture
def initialized(invoke):
    result = invoke("init", "-o", "1000")
    assert result.exit_code == 0, result.output
    return invoke


def _data_lines(output):
    """Table rows below the header and rule."""
    return output.strip().splitlines()[2:]


class TestFormatting:

    def test_fmt_money(self):
        assert fmt_money(Decimal("1600")) == "1,600.00"
        assert fmt_money(Decimal("0.005")) == "0.01"
        assert fmt_money(Decimal("-2.5")) == "-2.50"


class TestInit:

    def test_init(self, invoke):
        result = invoke("init", "-c", "usd", "-o", "250")
        assert result.exit_code == 0
        assert "Ledger initialized (USD, opening balance 250.00)" in result.output

    def test_init_twice(self, initialized):
        result = initialized("init")
        assert result.exit_code == 1
        assert "Error: Ledger already initialized" in result.output

    def test_bad_currency(self, invoke):
        result = invoke("init", "-c", "xyz")
        assert result.exit_code == 1
        assert "Unsupported currency 'xyz'" in result.output

    def test_command_before_init(self, invoke):
        result = invoke("total")
        assert result.exit_code == 1
        assert "Run 'fintrack init'" in result.output

    def test_file_backed(self, runner, tmp_path, monkeypatch):
        """Without an injected service the ledger lives under FINTRACK_HOME_DIR."""
        monkeypatch.setenv("FINTRACK_HOME_DIR", str(tmp_path))
        result = runner.invoke(main, ["init"])
        assert result.exit_code == 0, result.output
        tracker = tmp_path / ".fintrack" / "tracker.json"
        assert tracker.is_file()

        result = runner.invoke(main, ["add", "income", "5", "-D", "02-01-2025"])
        assert result.exit_code == 0, result.output
        document = json.loads(tracker.read_text(encoding="utf-8"))
        assert document["records"][0]["date"] == "02-01-2025"


class TestRecords:

    def test_add(self, initialized):
        result = initialized("add", "income", "1000", "-d", "salary", "-D", "01-01-2025")
        assert result.exit_code == 0
        assert "Added record 1: income 1,000.00 on 01-01-2025" in result.output

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_add_too_small(self, initialized, cli_service, amount):
        result = initialized("add", "expenses", "--", amount)
        assert result.exit_code == 1
        assert "Error: Amount must be greater than zero" in result.output
        assert cli_service.storage.document["records"] == []

    def test_add_bad_date(self, initialized):
        result = initialized("add", "income", "5", "-D", "2025-01-01")
        assert result.exit_code == 1
        assert "is not in the format DD-MM-YYYY" in result.output

    def test_add_bad_category(self, initialized):
        result = initialized("add", "savings", "5")
        assert result.exit_code == 1
        assert "Unknown category 'savings'" in result.output

    def test_add_unknown_subcategory(self, initialized):
        result = initialized("add", "income", "5", "-s", "rent")
        assert result.exit_code == 1
        assert "Subcategory 'rent' not found" in result.output

    def test_update(self, initialized):
        initialized("add", "income", "10")
        result = initialized("update", "1", "-a", "12.5", "-c", "expenses")
        assert result.exit_code == 0
        assert "Updated record 1" in result.output

    def test_update_nothing(self, initialized):
        initialized("add", "income", "10")
        result = initialized("update", "1")
        assert result.exit_code == 2

    def test_update_missing_record(self, initialized):
        result = initialized("update", "9", "-a", "1")
        assert result.exit_code == 1
        assert "Record with id 9 not found" in result.output

    def test_delete_by_ids(self, initialized):
        for amount in ("1", "2", "3"):
            initialized("add", "income", amount)
        result = initialized("delete", "-i", "1,3,99")
        assert result.exit_code == 0
        assert "Deleted 2 record(s)" in result.output

    def test_delete_needs_one_selector(self, initialized):
        assert initialized("delete").exit_code == 2
        assert initialized("delete", "-i", "1", "-c", "income").exit_code == 2

    def test_delete_bad_ids(self, initialized):
        result = initialized("delete", "-i", "one,two")
        assert result.exit_code == 2

    def test_list_last_two(self, initialized):
        initialized("add", "income", "500", "-D", "10-01-2025")
        initialized("add", "income", "300", "-D", "01-01-2025")
        initialized("add", "expenses", "200", "-D", "05-01-2025")
        result = initialized("list", "-l", "2")
        assert result.exit_code == 0
        rows = _data_lines(result.output)
        assert [row.split()[0] for row in rows] == ["3", "1"]
        assert "05-01-2025" in rows[0]

    def test_list_date_range(self, initialized):
        initialized("add", "income", "500", "-D", "10-01-2025")
        initialized("add", "expenses", "200", "-D", "05-01-2025")
        result = initialized("list", "-S", "02-01-2025", "-E", "09-01-2025")
        rows = _data_lines(result.output)
        assert len(rows) == 1
        assert "Expenses" in rows[0]
        assert "200.00" in rows[0]

    def test_list_empty(self, initialized):
        result = initialized("list")
        assert "No records found." in result.output

    def test_list_first_and_last(self, initialized):
        result = initialized("list", "-f", "1", "-l", "1")
        assert result.exit_code == 2


class TestReports:

    def test_total(self, initialized):
        initialized("add", "income", "500")
        initialized("add", "income", "300")
        initialized("add", "expenses", "200")
        result = initialized("total")
        assert result.exit_code == 0
        assert "Total (NGN)" in result.output
        assert "1,600.00" in result.output

    def test_describe(self, initialized):
        initialized("add", "income", "500", "-D", "10-01-2025")
        initialized("add", "expenses", "200", "-D", "05-01-2025")
        result = initialized("describe")
        assert result.exit_code == 0
        assert "Total records: 2" in result.output
        assert "Date range: 05-01-2025 to 10-01-2025" in result.output
        assert "Average amount: 350.00 NGN" in result.output

    def test_dump(self, initialized):
        result = initialized("dump")
        assert result.exit_code == 0
        assert json.loads(result.output)["categories"] == {"income": 1, "expenses": 2}

    def test_export(self, initialized, tmp_path):
        initialized("add", "income", "5")
        result = initialized("export", str(tmp_path), "-t", "csv")
        assert result.exit_code == 0
        assert "Data exported to:" in result.output
        assert len(list(tmp_path.glob("fintrack_export_*.csv"))) == 1

    def test_export_missing_directory(self, initialized, tmp_path):
        result = initialized("export", str(tmp_path / "missing"))
        assert result.exit_code == 1
        assert "Path does not exist" in result.output


class TestClear:

    def test_clear_declined(self, initialized, cli_service):
        result = initialized("clear", input="n\n")
        assert result.exit_code == 1
        assert cli_service.storage.exists()

    def test_clear_confirmed(self, initialized, cli_service):
        result = initialized("clear", input="y\n")
        assert result.exit_code == 0
        assert not cli_service.storage.exists()

    def test_clear_yes(self, initialized, cli_service):
        result = initialized("clear", "--yes")
        assert result.exit_code == 0
        assert "Ledger removed" in result.output
        assert not cli_service.storage.exists()


class TestCategoriesAndSubcategories:

    def test_category_list(self, initialized):
        result = initialized("category", "list")
        assert result.exit_code == 0
        assert "Income" in result.output
        assert "Expenses" in result.output

    @pytest.mark.parametrize("args", [
        ("category", "add", "savings"),
        ("category", "rename", "income", "earnings"),
        ("category", "delete", "expenses"),
    ])
    def test_category_changes_refused(self, initialized, args):
        result = initialized(*args)
        assert result.exit_code == 1
        assert "is fixed and cannot be" in result.output

    def test_subcategory_lifecycle(self, initialized):
        result = initialized("subcategory", "add", "eating OUT")
        assert "Subcategory 'Eating out' created with id 2" in result.output

        result = initialized("subcategory", "update", "eating out", "dining")
        assert result.exit_code == 0
        assert "'Eating out' renamed to 'Dining'" in result.output

        result = initialized("subcategory", "list")
        assert "Dining" in result.output

        result = initialized("subcategory", "delete", "dining")
        assert result.exit_code == 0
        assert "Subcategory 'Dining' deleted" in result.output

    def test_subcategory_reserved(self, initialized):
        result = initialized("subcategory", "delete", "miscellaneous")
        assert result.exit_code == 1
        assert "reserved subcategory" in result.output

    def test_subcategory_in_use(self, initialized):
        initialized("subcategory", "add", "food")
        initialized("add", "expenses", "5", "-s", "food")
        result = initialized("subcategory", "delete", "food")
        assert result.exit_code == 1
        assert "has 1 record(s)" in result.output
