"""Ledger mutation operations."""

from fintrack.operations.lifecycle import create_ledger, reject_category_change
from fintrack.operations.records import (
    add_record,
    delete_records,
    delete_records_by_category,
    delete_records_by_ids,
    delete_records_by_subcategory,
    update_record,
)
from fintrack.operations.subcategories import (
    add_subcategory,
    delete_subcategory,
    rename_subcategory,
)

__all__ = [
    "add_record",
    "add_subcategory",
    "create_ledger",
    "delete_records",
    "delete_records_by_category",
    "delete_records_by_ids",
    "delete_records_by_subcategory",
    "delete_subcategory",
    "reject_category_change",
    "rename_subcategory",
    "update_record",
]
