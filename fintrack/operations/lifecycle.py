"""
Ledger Lifecycle Operations

Creating a ledger, and refusing to change the fixed categories.
Whether a ledger already exists on disk is the storage layer's question;
see LedgerStorageInterface.create.
"""

from typing import Optional, Union

from fintrack.errors import CategoryImmutableError
from fintrack.models.ledger import Category, Ledger
from fintrack.models.requests import InitLedgerRequest
from fintrack.validation import require_storable_amount


def create_ledger(
    request: InitLedgerRequest,
    now: Optional[str] = None,
) -> Ledger:
    """
    Build the default ledger: two categories, Miscellaneous, no records.

    Raises:
        InvalidAmountError: opening balance cannot be stored as a JSON number
    """
    return Ledger.new(
        currency=request.currency,
        opening_balance=require_storable_amount(request.opening_balance),
        now=now,
    )


def reject_category_change(category: Union[Category, str]) -> None:
    """
    Categories are fixed for the lifetime of a ledger.

    Accepts a Category or any name a user typed; either way the answer
    is the same.

    Raises:
        CategoryImmutableError: always
    """
    if isinstance(category, Category):
        raise CategoryImmutableError(category.label)
    raise CategoryImmutableError(category.strip().lower())
