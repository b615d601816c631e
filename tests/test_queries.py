"""
Tests for the query engine

Queries must be deterministic and read-only: the same ledger always gives
the same answer, and the ledger is never changed.
"""

import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from fintrack.models.ledger import Category, Record
from fintrack.models.requests import ListRecordsQuery
from fintrack.queries import QueryExecutor

from conftest import add


def _dates(listing):
    return [r.date for r in listing.records]


class TestListRecords:
    """Tests for filtering, sorting and limiting."""

    def test_sorted_by_date(self, populated_ledger):
        """Records come back oldest first whatever the insertion order."""
        listing = QueryExecutor(populated_ledger).list_records(ListRecordsQuery())
        assert _dates(listing) == ["01-01-2025", "05-01-2025", "10-01-2025"]
        assert listing.count == 3

    def test_date_range(self, populated_ledger):
        """start=02-01, end=09-01 keeps only the 05-01 record."""
        listing = QueryExecutor(populated_ledger).list_records(
            ListRecordsQuery(start=datetime.date(2025, 1, 2), end=datetime.date(2025, 1, 9))
        )
        assert _dates(listing) == ["05-01-2025"]

    def test_date_range_is_inclusive(self, populated_ledger):
        listing = QueryExecutor(populated_ledger).list_records(
            ListRecordsQuery(start=datetime.date(2025, 1, 5), end=datetime.date(2025, 1, 10))
        )
        assert _dates(listing) == ["05-01-2025", "10-01-2025"]

    def test_last_two_ascending(self, populated_ledger):
        """last=2 returns the two newest, still in ascending order."""
        listing = QueryExecutor(populated_ledger).list_records(ListRecordsQuery(last=2))
        assert _dates(listing) == ["05-01-2025", "10-01-2025"]

    def test_first(self, populated_ledger):
        listing = QueryExecutor(populated_ledger).list_records(ListRecordsQuery(first=1))
        assert _dates(listing) == ["01-01-2025"]

    @pytest.mark.parametrize("limit", [{"first": 0}, {"last": 0}, {"last": 10}, {"first": 10}])
    def test_limits_that_keep_everything(self, populated_ledger, limit):
        """N == 0 is a no-op and N >= len keeps all."""
        listing = QueryExecutor(populated_ledger).list_records(ListRecordsQuery(**limit))
        assert listing.count == 3

    def test_first_and_last_are_exclusive(self):
        with pytest.raises(ValidationError):
            ListRecordsQuery(first=1, last=1)

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            ListRecordsQuery(last=-1)

    def test_category_filter(self, populated_ledger):
        listing = QueryExecutor(populated_ledger).list_records(
            ListRecordsQuery(category=Category.INCOME)
        )
        assert [r.id for r in listing.records] == [2, 1]

    def test_subcategory_filter_and_category(self, populated_ledger):
        """Filters combine with AND."""
        executor = QueryExecutor(populated_ledger)
        food = executor.list_records(ListRecordsQuery(subcategory="Food"))
        assert [r.id for r in food.records] == [3]
        nothing = executor.list_records(
            ListRecordsQuery(subcategory="food", category=Category.INCOME)
        )
        assert nothing.records == []

    def test_unknown_subcategory_filter_is_ignored(self, populated_ledger):
        listing = QueryExecutor(populated_ledger).list_records(ListRecordsQuery(subcategory="rent"))
        assert listing.count == 3

    def test_unparseable_dates_are_skipped(self, populated_ledger):
        """A record with a malformed date is excluded, not an error."""
        ledger = populated_ledger.model_copy(deep=True)
        ledger.records.append(
            Record(id=4, category=Category.INCOME, subcategory=1,
                   amount=Decimal("1"), date="2025/01/07")
        )
        ledger.next_record_id = 5
        listing = QueryExecutor(ledger).list_records(ListRecordsQuery())
        assert [r.id for r in listing.records] == [2, 3, 1]

    def test_same_day_keeps_insertion_order(self, ledger):
        for amount in (1, 2, 3):
            ledger = add(ledger, Category.INCOME, amount, 4)
        listing = QueryExecutor(ledger).list_records(ListRecordsQuery())
        assert [r.id for r in listing.records] == [1, 2, 3]

    def test_query_does_not_change_ledger(self, populated_ledger):
        before = populated_ledger.to_document()
        QueryExecutor(populated_ledger).list_records(ListRecordsQuery(last=1))
        assert populated_ledger.to_document() == before


class TestTotal:
    """Tests for the running balance."""

    def test_total(self, populated_ledger):
        """1000 + 800 - 200 = 1600."""
        result = QueryExecutor(populated_ledger).total()
        assert result.opening_balance == Decimal("1000")
        assert result.income_total == Decimal("800")
        assert result.expenses_total == Decimal("200")
        assert result.total == Decimal("1600")

    def test_total_empty(self, ledger):
        assert QueryExecutor(ledger).total().total == Decimal("1000")

    def test_no_rounding_during_sums(self, ledger):
        for amount in ("0.10", "0.20", "0.005"):
            ledger = add(ledger, Category.INCOME, amount, 1)
        assert QueryExecutor(ledger).total().income_total == Decimal("0.305")


class TestDescribe:
    """Tests for descriptive statistics."""

    def test_empty_ledger(self, ledger):
        result = QueryExecutor(ledger).describe()
        assert result.total_records == 0
        assert result.date_range is None
        assert result.by_category == []
        assert result.average_amount == Decimal("0")

    def test_populated(self, populated_ledger):
        result = QueryExecutor(populated_ledger).describe()
        assert result.total_records == 3
        assert result.date_range == ("01-01-2025", "10-01-2025")
        assert [(e.name, e.count, e.total) for e in result.by_category] == [
            ("income", 2, Decimal("800")),
            ("expenses", 1, Decimal("200")),
        ]
        assert [e.name for e in result.by_subcategory] == ["Miscellaneous", "Salary", "Food"]
        assert result.average_amount == Decimal("1000") / 3
        assert result.currency.value == "NGN"


class TestListings:

    def test_list_categories(self, ledger):
        assert QueryExecutor(ledger).list_categories() == [(1, "income"), (2, "expenses")]

    def test_list_subcategories(self, populated_ledger):
        assert QueryExecutor(populated_ledger).list_subcategories() == [
            (1, "Miscellaneous"),
            (2, "Food"),
            (3, "Salary"),
        ]
