"""
Result Models

What the operations and queries hand back to their caller alongside the
(possibly new) ledger. Amounts stay Decimal; rounding for display is the
caller's concern.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from fintrack.models.ledger import Currency, Record, Subcategory


class DeleteResult(BaseModel):
    """Outcome of a record deletion."""

    deleted_ids: list[int] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.deleted_ids)


class RenameResult(BaseModel):
    old_name: str
    subcategory: Subcategory


class RecordListing(BaseModel):
    """Records matching a ListRecordsQuery, sorted by date ascending."""

    records: list[Record] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)


class BreakdownEntry(BaseModel):
    """Count and sum of amounts for one category or subcategory."""

    name: str
    count: int = Field(ge=0)
    total: Decimal


class DescribeResult(BaseModel):
    """Descriptive statistics over every record in the ledger."""

    total_records: int = Field(ge=0)
    date_range: Optional[tuple[str, str]] = Field(
        default=None,
        description="(earliest, latest) as DD-MM-YYYY; None when no date parses"
    )
    by_category: list[BreakdownEntry] = Field(default_factory=list)
    by_subcategory: list[BreakdownEntry] = Field(default_factory=list)
    average_amount: Decimal = Decimal("0")
    currency: Currency


class TotalResult(BaseModel):
    """The running balance and its components."""

    opening_balance: Decimal
    income_total: Decimal
    expenses_total: Decimal
    currency: Currency

    @property
    def total(self) -> Decimal:
        return self.opening_balance + self.income_total - self.expenses_total
