"""
Ledger Exceptions

Every failure the core can report is a subclass of LedgerError.
Validation errors are user-correctable and always leave the ledger
untouched. The CLI is responsible for turning them into messages.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional, Union


DATE_FORMAT_HINT = "DD-MM-YYYY"


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class LedgerValidationError(LedgerError):
    """The request cannot be applied to the current ledger."""
    pass


class AmountTooSmallError(LedgerValidationError):
    """Amounts must be strictly positive."""

    def __init__(self, amount: Union[Decimal, float, int]):
        self.amount = amount
        super().__init__(f"Amount must be greater than zero (got {amount})")


class InvalidAmountError(LedgerValidationError):
    """An amount string is not a finite decimal number."""

    def __init__(self, provided: str, reason: str = "not a number"):
        self.provided = provided
        self.reason = reason
        super().__init__(f"Invalid amount '{provided}': {reason}")


class InvalidDateError(LedgerValidationError):
    """A date string is not in the expected format."""

    def __init__(self, provided: str, expected_format: str = DATE_FORMAT_HINT):
        self.provided = provided
        self.expected_format = expected_format
        super().__init__(f"'{provided}' is not in the format {expected_format}")


class InvalidCategoryError(LedgerValidationError):
    """Category name is neither income nor expenses."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unknown category '{name}' (expected 'income' or 'expenses')"
        )


class InvalidCurrencyError(LedgerValidationError):
    """Currency code is not in the supported set."""

    def __init__(self, code: str, supported: Optional[list[str]] = None):
        self.code = code
        self.supported = supported or []
        message = f"Unsupported currency '{code}'"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)


class InvalidNameError(LedgerValidationError):
    """A subcategory label is empty or malformed."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid name '{name}': {reason}")


class SubcategoryNotFoundError(LedgerValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Subcategory '{name}' not found")


class SubcategoryAlreadyExistsError(LedgerValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Subcategory '{name}' already exists")


class SubcategoryHasRecordsError(LedgerValidationError):
    """Subcategory is still referenced by records."""

    def __init__(self, name: str, count: int):
        self.name = name
        self.count = count
        super().__init__(
            f"Subcategory '{name}' has {count} record(s); "
            "delete or move them first"
        )


class ReservedSubcategoryError(LedgerValidationError):
    """The Miscellaneous subcategory cannot be created, renamed or deleted."""

    def __init__(self, name: str = "Miscellaneous"):
        self.name = name
        super().__init__(
            f"'{name}' is a reserved subcategory and cannot be modified"
        )


class CategoryImmutableError(LedgerValidationError):
    """Categories are fixed for the lifetime of a ledger."""

    def __init__(self, category: Union[int, str]):
        self.category = category
        super().__init__(
            f"Category '{category}' is fixed and cannot be created, "
            "renamed or deleted"
        )


class RecordNotFoundError(LedgerValidationError):
    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Record with id {record_id} not found")


class LedgerAlreadyInitializedError(LedgerValidationError):
    def __init__(self, path: Optional[Path] = None):
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(f"Ledger already initialized{where}")


class LedgerIntegrityError(LedgerError):
    """The ledger violates one of its structural invariants."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Ledger integrity check failed: " + "; ".join(problems))
