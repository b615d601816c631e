"""
Subcategory Operations

A subcategory is either absent or present:

    absent  --add-->    present
    present --rename--> present (same id, new name)
    present --delete--> absent  (only when no record uses it)

Miscellaneous (id 1) is reserved: it can be neither added again,
renamed nor deleted. Records refer to subcategories by id, so a rename
is visible on every record without touching them.
"""

from typing import Optional

from fintrack.errors import (
    ReservedSubcategoryError,
    SubcategoryAlreadyExistsError,
    SubcategoryHasRecordsError,
    SubcategoryNotFoundError,
)
from fintrack.models.ledger import (
    MISCELLANEOUS_KEY,
    MISCELLANEOUS_NAME,
    Ledger,
    Subcategory,
    lookup_key,
)
from fintrack.models.requests import (
    AddSubcategoryRequest,
    DeleteSubcategoryRequest,
    RenameSubcategoryRequest,
)
from fintrack.models.results import RenameResult
from fintrack.validation import normalize_label


def add_subcategory(
    ledger: Ledger,
    request: AddSubcategoryRequest,
    now: Optional[str] = None,
) -> tuple[Ledger, Subcategory]:
    """
    Create a subcategory, stored in Title Case.

    Raises:
        InvalidNameError: malformed label
        ReservedSubcategoryError: name is miscellaneous
        SubcategoryAlreadyExistsError: name already in use (any case)
    """
    display_name, key = normalize_label(request.name)
    if key == MISCELLANEOUS_KEY:
        raise ReservedSubcategoryError(MISCELLANEOUS_NAME)
    if key in ledger.subcategories_by_name:
        raise SubcategoryAlreadyExistsError(display_name)

    updated = ledger.model_copy(deep=True)
    subcategory = updated._register_subcategory(display_name, key)
    updated.touch(now)
    return updated, subcategory


def rename_subcategory(
    ledger: Ledger,
    request: RenameSubcategoryRequest,
    now: Optional[str] = None,
) -> tuple[Ledger, RenameResult]:
    """
    Give an existing subcategory a new name, keeping its id.

    Raises:
        ReservedSubcategoryError: old name is miscellaneous
        SubcategoryNotFoundError: old name absent
        InvalidNameError: malformed new label
        SubcategoryAlreadyExistsError: new name already in use
    """
    if lookup_key(request.old_name) == MISCELLANEOUS_KEY:
        raise ReservedSubcategoryError(MISCELLANEOUS_NAME)

    subcategory_id = ledger.subcategory_id(request.old_name)
    if subcategory_id is None:
        raise SubcategoryNotFoundError(request.old_name)

    display_name, key = normalize_label(request.new_name)
    if key in ledger.subcategories_by_name:
        raise SubcategoryAlreadyExistsError(display_name)

    old_display = ledger.subcategory_name(subcategory_id)
    updated = ledger.model_copy(deep=True)
    subcategory = updated._rename_subcategory(subcategory_id, display_name, key)
    updated.touch(now)
    return updated, RenameResult(old_name=old_display, subcategory=subcategory)


def delete_subcategory(
    ledger: Ledger,
    request: DeleteSubcategoryRequest,
    now: Optional[str] = None,
) -> tuple[Ledger, Subcategory]:
    """
    Remove a subcategory that no record refers to.

    Raises:
        ReservedSubcategoryError: name is miscellaneous
        SubcategoryNotFoundError: name absent
        SubcategoryHasRecordsError: records still use it (carries the count)
    """
    if lookup_key(request.name) == MISCELLANEOUS_KEY:
        raise ReservedSubcategoryError(MISCELLANEOUS_NAME)

    subcategory_id = ledger.subcategory_id(request.name)
    if subcategory_id is None:
        raise SubcategoryNotFoundError(request.name)

    dependents = ledger.count_records_in_subcategory(subcategory_id)
    if dependents > 0:
        raise SubcategoryHasRecordsError(
            ledger.subcategory_name(subcategory_id), dependents
        )

    updated = ledger.model_copy(deep=True)
    removed = updated._remove_subcategory(subcategory_id)
    updated.touch(now)
    return updated, removed
