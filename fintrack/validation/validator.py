"""
Input Validation

DESIGN DECISION: Validation of user input happens in two places:

STAGE 1 - INPUT PARSING (this module):
- Amount strings to Decimal
- Category / currency names to their enums
- Date strings to dates (DD-MM-YYYY)
- Subcategory labels to their stored (Title Case) and lookup (lowercase) forms

STAGE 2 - LEDGER VALIDATION (fintrack.operations):
- Amount positivity
- Subcategory existence / uniqueness
- Reserved subcategory protection
- Record existence

Stage 1 needs nothing but the input; stage 2 needs the loaded ledger.

IMPORTANT: Validation NEVER silently fixes issues beyond normalizing
case and surrounding whitespace. Everything else is reported.
"""

import datetime
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Union

from fintrack.errors import (
    AmountTooSmallError,
    InvalidAmountError,
    InvalidNameError,
)
from fintrack.models.ledger import Category, Currency
from fintrack.utils.dates import parse_date


MAX_LABEL_LENGTH = 50

# Letters (any script), digits, spaces and a few joiners; must start with
# a letter or digit.
_LABEL_PATTERN = re.compile(r"^[^\W_][\w &'\-.]*$")


def parse_amount(value: Union[str, int, float, Decimal]) -> Decimal:
    """
    Convert user input to a Decimal.

    Sign is not checked here; see require_positive_amount.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        text = repr(value) if isinstance(value, float) else str(value).strip()
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise InvalidAmountError(str(value)) from None
    if not amount.is_finite():
        raise InvalidAmountError(str(value), reason="must be a finite number")
    return require_storable_amount(amount)


def require_storable_amount(amount: Decimal) -> Decimal:
    """
    Amounts are written as JSON numbers (doubles).

    Reject values that would become inf, or collapse from non-zero to 0.0,
    on the way to disk.
    """
    if not amount.is_finite():
        raise InvalidAmountError(str(amount), reason="must be a finite number")
    as_float = float(amount)
    if not math.isfinite(as_float):
        raise InvalidAmountError(str(amount), reason="too large to store")
    if as_float == 0 and amount != 0:
        raise InvalidAmountError(str(amount), reason="too small to store")
    return amount


def require_positive_amount(amount: Decimal) -> Decimal:
    """Raise AmountTooSmallError unless amount > 0 and it can be stored."""
    if amount.is_finite() and amount <= 0:
        raise AmountTooSmallError(amount)
    return require_storable_amount(amount)


def parse_category(name: str) -> Category:
    return Category.from_name(name)


def parse_currency(code: str) -> Currency:
    return Currency.from_code(code)


def parse_record_date(value: str) -> datetime.date:
    return parse_date(value)


def title_case(name: str) -> str:
    """
    First character upper case, the rest lower case.

    A first character whose upper case does not lower back to it (ß, ﬁ)
    is left alone, so title_case(x).lower() == x.lower() always holds.
    """
    lowered = name.lower()
    first = lowered[:1]
    upper = first.upper()
    if upper.lower() != first:
        upper = first
    return upper + lowered[1:]


def normalize_label(name: str) -> tuple[str, str]:
    """
    Validate a subcategory label.

    Returns:
        (display_name, lookup_key) e.g. ("Eating out", "eating out")

    Raises:
        InvalidNameError: if the label is empty, too long or malformed
    """
    cleaned = " ".join(name.split())
    if not cleaned:
        raise InvalidNameError(name, "name cannot be empty")
    if len(cleaned) > MAX_LABEL_LENGTH:
        raise InvalidNameError(
            name, f"name cannot be longer than {MAX_LABEL_LENGTH} characters"
        )
    if not _LABEL_PATTERN.match(cleaned):
        raise InvalidNameError(
            name,
            "use letters, digits, spaces and - _ & ' . only, "
            "starting with a letter or digit",
        )
    return title_case(cleaned), cleaned.lower()
