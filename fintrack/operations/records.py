"""
Record Operations

Add, update and delete records.

Every function takes the current Ledger and a request and returns
(new_ledger, result). The input ledger is never mutated: all checks run
against it first, and only then is a deep copy changed. A failing call
therefore leaves nothing half-applied.
"""

from typing import Optional

from fintrack.errors import RecordNotFoundError, SubcategoryNotFoundError
from fintrack.models.ledger import Category, Ledger, Record
from fintrack.models.requests import (
    AddRecordRequest,
    DeleteRecordsRequest,
    UpdateRecordRequest,
)
from fintrack.models.results import DeleteResult
from fintrack.utils.dates import format_date, today
from fintrack.validation import require_positive_amount


def _resolve_subcategory(ledger: Ledger, name: str) -> int:
    subcategory_id = ledger.subcategory_id(name)
    if subcategory_id is None:
        raise SubcategoryNotFoundError(name)
    return subcategory_id


def add_record(
    ledger: Ledger,
    request: AddRecordRequest,
    now: Optional[str] = None,
) -> tuple[Ledger, Record]:
    """
    Append a new record.

    The record gets id = next_record_id and the counter moves on by one.
    Date defaults to today, subcategory to Miscellaneous.

    Raises:
        AmountTooSmallError: amount <= 0
        SubcategoryNotFoundError: subcategory name does not resolve
    """
    amount = require_positive_amount(request.amount)
    subcategory_id = _resolve_subcategory(ledger, request.subcategory)
    record_date = request.date or today()

    updated = ledger.model_copy(deep=True)
    record = Record(
        id=updated.next_record_id,
        category=request.category,
        subcategory=subcategory_id,
        description=request.description,
        amount=amount,
        date=format_date(record_date),
    )
    updated.records.append(record)
    updated.next_record_id = record.id + 1
    updated.touch(now)
    return updated, record


def update_record(
    ledger: Ledger,
    request: UpdateRecordRequest,
    now: Optional[str] = None,
) -> tuple[Ledger, Record]:
    """
    Change the supplied fields of one record.

    Raises:
        RecordNotFoundError: no record has request.record_id
        AmountTooSmallError: a supplied amount is <= 0
        SubcategoryNotFoundError: a supplied subcategory does not resolve
    """
    if ledger.find_record(request.record_id) is None:
        raise RecordNotFoundError(request.record_id)

    changes = {}
    if request.category is not None:
        changes["category"] = request.category
    if request.amount is not None:
        changes["amount"] = require_positive_amount(request.amount)
    if request.subcategory is not None:
        changes["subcategory"] = _resolve_subcategory(ledger, request.subcategory)
    if request.description is not None:
        changes["description"] = request.description
    if request.date is not None:
        changes["date"] = format_date(request.date)

    updated = ledger.model_copy(deep=True)
    for index, record in enumerate(updated.records):
        if record.id == request.record_id:
            changed = record.model_copy(update=changes)
            updated.records[index] = changed
            break

    if changes:
        updated.touch(now)
    return updated, changed


def delete_records_by_ids(
    ledger: Ledger,
    ids: set[int],
    now: Optional[str] = None,
) -> tuple[Ledger, DeleteResult]:
    """Remove records whose id is in ids. Unknown ids are ignored."""
    return _delete_where(ledger, lambda r: r.id in ids, now)


def delete_records_by_category(
    ledger: Ledger,
    category: Category,
    now: Optional[str] = None,
) -> tuple[Ledger, DeleteResult]:
    return _delete_where(ledger, lambda r: r.category == category, now)


def delete_records_by_subcategory(
    ledger: Ledger,
    name: str,
    now: Optional[str] = None,
) -> tuple[Ledger, DeleteResult]:
    """
    Raises:
        SubcategoryNotFoundError: name does not resolve
    """
    subcategory_id = _resolve_subcategory(ledger, name)
    return _delete_where(ledger, lambda r: r.subcategory == subcategory_id, now)


def delete_records(
    ledger: Ledger,
    request: DeleteRecordsRequest,
    now: Optional[str] = None,
) -> tuple[Ledger, DeleteResult]:
    """Dispatch on whichever selector the request carries."""
    if request.ids is not None:
        return delete_records_by_ids(ledger, request.ids, now)
    if request.category is not None:
        return delete_records_by_category(ledger, request.category, now)
    return delete_records_by_subcategory(ledger, request.subcategory, now)


def _delete_where(ledger, predicate, now):
    updated = ledger.model_copy(deep=True)
    kept = []
    deleted_ids = []
    for record in updated.records:
        if predicate(record):
            deleted_ids.append(record.id)
        else:
            kept.append(record)

    if deleted_ids:
        updated.records = kept
        updated.touch(now)
    return updated, DeleteResult(deleted_ids=deleted_ids)
