"""Input validation package."""

from fintrack.validation.validator import (
    MAX_LABEL_LENGTH,
    normalize_label,
    parse_amount,
    parse_category,
    parse_currency,
    parse_record_date,
    require_positive_amount,
    require_storable_amount,
    title_case,
)

__all__ = [
    "MAX_LABEL_LENGTH",
    "normalize_label",
    "parse_amount",
    "parse_category",
    "parse_currency",
    "parse_record_date",
    "require_positive_amount",
    "require_storable_amount",
    "title_case",
]
