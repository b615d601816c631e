"""
Query Execution Engine

DESIGN DECISION: Queries are read-only and DETERMINISTIC.
They run against a loaded Ledger and never modify it, so the caller does
not have to persist anything after a query.

GUARANTEES:
- Only real records from the ledger are returned
- Sums are exact Decimals; nothing is rounded here
- Records with an unparseable date are left out of anything that
  filters or sorts by date, without raising
"""

from collections import defaultdict
from decimal import Decimal
from typing import Callable, Optional

from fintrack.models.ledger import Category, Ledger, Record
from fintrack.models.requests import ListRecordsQuery
from fintrack.models.results import (
    BreakdownEntry,
    DescribeResult,
    RecordListing,
    TotalResult,
)
from fintrack.utils.dates import format_date


class QueryExecutor:
    """
    Executes read-only queries against one Ledger.

    Usage:
        executor = QueryExecutor(ledger)
        listing = executor.list_records(ListRecordsQuery(last=5))
        balance = executor.total().total
    """

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    def list_records(self, query: ListRecordsQuery) -> RecordListing:
        """
        Filter, sort by date ascending, then apply first/last.

        A subcategory filter that names an unknown subcategory is ignored
        rather than matching nothing.
        """
        ledger = self._ledger

        subcategory_id = None
        if query.subcategory is not None:
            subcategory_id = ledger.subcategory_id(query.subcategory)

        matched = []
        for record in ledger.records:
            record_date = record.parsed_date
            if record_date is None:
                continue
            if query.category is not None and record.category != query.category:
                continue
            if subcategory_id is not None and record.subcategory != subcategory_id:
                continue
            if query.start is not None and record_date < query.start:
                continue
            if query.end is not None and record_date > query.end:
                continue
            matched.append((record_date, record))

        # list.sort is stable: same-day records keep insertion order
        matched.sort(key=lambda pair: pair[0])
        records = [record for _, record in matched]

        if query.first:
            records = records[:query.first]
        elif query.last and len(records) > query.last:
            records = records[len(records) - query.last:]

        return RecordListing(records=records)

    def describe(self) -> DescribeResult:
        """Statistics over every record, ignoring any filter."""
        ledger = self._ledger
        records = ledger.records
        total_records = len(records)

        dates = [d for d in (r.parsed_date for r in records) if d is not None]
        date_range = None
        if dates:
            date_range = (format_date(min(dates)), format_date(max(dates)))

        by_category = self._breakdown(
            records,
            key=lambda r: int(r.category),
            name_of=ledger.category_name,
        )
        by_subcategory = self._breakdown(
            records,
            key=lambda r: r.subcategory,
            name_of=ledger.subcategory_name,
        )

        average = Decimal("0")
        if total_records:
            average = sum((r.amount for r in records), Decimal("0")) / total_records

        return DescribeResult(
            total_records=total_records,
            date_range=date_range,
            by_category=by_category,
            by_subcategory=by_subcategory,
            average_amount=average,
            currency=ledger.currency,
        )

    def total(self) -> TotalResult:
        """opening_balance + income - expenses, with its components."""
        income, expenses = self._ledger.totals()
        return TotalResult(
            opening_balance=self._ledger.opening_balance,
            income_total=income,
            expenses_total=expenses,
            currency=self._ledger.currency,
        )

    def list_categories(self) -> list[tuple[int, str]]:
        """(id, name) for both categories, ordered by id."""
        return sorted(
            (category_id, name)
            for name, category_id in Category.document_map().items()
        )

    def list_subcategories(self) -> list[tuple[int, str]]:
        """(id, name) for every subcategory, ordered by id."""
        return [(s.id, s.name) for s in self._ledger.subcategories]

    def _breakdown(
        self,
        records: list[Record],
        key: Callable[[Record], int],
        name_of: Callable[[int], Optional[str]],
    ) -> list[BreakdownEntry]:
        """Group by key into (name, count, sum), largest sum first."""
        counts: dict[int, int] = defaultdict(int)
        sums: dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
        for record in records:
            group = key(record)
            counts[group] += 1
            sums[group] += record.amount

        entries = []
        for group, count in counts.items():
            name = name_of(group)
            if name is None:
                continue
            entries.append(BreakdownEntry(name=name, count=count, total=sums[group]))

        entries.sort(key=lambda e: e.total, reverse=True)
        return entries
