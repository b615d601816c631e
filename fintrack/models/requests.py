"""
Request Models

Each ledger operation takes one of these already-parsed, typed requests.
Turning command-line text into a request is the CLI's job; these models
only hold values and enforce the shape rules that do not depend on the
ledger contents (mutually exclusive selectors, non-negative limits).

Amount positivity and subcategory existence are NOT checked here: they
are ledger-level validation and raise typed LedgerValidationErrors from
the operations.
"""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from fintrack.models.ledger import MISCELLANEOUS_KEY, Category, Currency


class InitLedgerRequest(BaseModel):
    """Parameters for creating a new ledger."""

    currency: Currency = Field(
        default=Currency.NGN,
        description="Currency for every amount in the ledger"
    )
    opening_balance: Decimal = Field(
        default=Decimal("0"),
        description="Balance before any income or expenses"
    )


class AddRecordRequest(BaseModel):
    """A new income or expense record."""

    category: Category
    amount: Decimal
    subcategory: str = Field(
        default=MISCELLANEOUS_KEY,
        description="Subcategory name (case-insensitive)"
    )
    description: str = ""
    date: Optional[datetime.date] = Field(
        default=None,
        description="Record date; today when omitted"
    )

    @field_validator('subcategory')
    @classmethod
    def strip_subcategory(cls, v: str) -> str:
        return v.strip()


class UpdateRecordRequest(BaseModel):
    """
    Changes to an existing record.

    Only fields that are not None are applied; everything else keeps its
    previous value.
    """

    record_id: int = Field(..., ge=1)
    category: Optional[Category] = None
    amount: Optional[Decimal] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime.date] = None

    @field_validator('subcategory')
    @classmethod
    def strip_subcategory(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None

    @property
    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (
                self.category,
                self.amount,
                self.subcategory,
                self.description,
                self.date,
            )
        )


class DeleteRecordsRequest(BaseModel):
    """
    Which records to delete.

    Exactly one selector must be given: a set of ids, a category, or a
    subcategory name.
    """

    ids: Optional[set[int]] = None
    category: Optional[Category] = None
    subcategory: Optional[str] = None

    @model_validator(mode='after')
    def exactly_one_selector(self) -> 'DeleteRecordsRequest':
        given = [
            name
            for name, value in (
                ("ids", self.ids),
                ("category", self.category),
                ("subcategory", self.subcategory),
            )
            if value is not None
        ]
        if len(given) != 1:
            raise ValueError(
                "Exactly one of ids, category or subcategory must be given"
            )
        return self


class AddSubcategoryRequest(BaseModel):
    name: str


class RenameSubcategoryRequest(BaseModel):
    old_name: str
    new_name: str


class DeleteSubcategoryRequest(BaseModel):
    name: str


class ListRecordsQuery(BaseModel):
    """
    Filters for listing records.

    All filters are optional and combined with AND. first/last are applied
    after sorting by date and cannot be used together.
    """

    category: Optional[Category] = None
    subcategory: Optional[str] = None
    start: Optional[datetime.date] = Field(
        default=None,
        description="Only records on or after this date"
    )
    end: Optional[datetime.date] = Field(
        default=None,
        description="Only records on or before this date"
    )
    first: Optional[int] = Field(
        default=None,
        ge=0,
        description="Keep the N oldest matching records"
    )
    last: Optional[int] = Field(
        default=None,
        ge=0,
        description="Keep the N newest matching records"
    )

    @model_validator(mode='after')
    def first_or_last(self) -> 'ListRecordsQuery':
        if self.first is not None and self.last is not None:
            raise ValueError("first and last cannot be used together")
        return self
