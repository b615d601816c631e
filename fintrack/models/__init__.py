"""
Data Models Package

This package contains all Pydantic models used in fintrack.
The ledger document, every request and every result conform to these schemas.
"""

from fintrack.models.ledger import (
    LEDGER_VERSION,
    MISCELLANEOUS_ID,
    MISCELLANEOUS_KEY,
    MISCELLANEOUS_NAME,
    Category,
    Currency,
    Ledger,
    Record,
    Subcategory,
)
from fintrack.models.requests import (
    AddRecordRequest,
    AddSubcategoryRequest,
    DeleteRecordsRequest,
    DeleteSubcategoryRequest,
    InitLedgerRequest,
    ListRecordsQuery,
    RenameSubcategoryRequest,
    UpdateRecordRequest,
)
from fintrack.models.results import (
    BreakdownEntry,
    DeleteResult,
    DescribeResult,
    RecordListing,
    RenameResult,
    TotalResult,
)
from fintrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "LEDGER_VERSION",
    "MISCELLANEOUS_ID",
    "MISCELLANEOUS_KEY",
    "MISCELLANEOUS_NAME",
    "Category",
    "Currency",
    "Ledger",
    "Record",
    "Subcategory",
    # Requests
    "AddRecordRequest",
    "AddSubcategoryRequest",
    "DeleteRecordsRequest",
    "DeleteSubcategoryRequest",
    "InitLedgerRequest",
    "ListRecordsQuery",
    "RenameSubcategoryRequest",
    "UpdateRecordRequest",
    # Results
    "BreakdownEntry",
    "DeleteResult",
    "DescribeResult",
    "RecordListing",
    "RenameResult",
    "TotalResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
