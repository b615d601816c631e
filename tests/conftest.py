"""Shared fixtures for the fintrack test suite."""

import datetime
from decimal import Decimal

import pytest

from fintrack.audit import AuditLogger
from fintrack.models.ledger import Category, Currency, Ledger
from fintrack.models.requests import AddRecordRequest, AddSubcategoryRequest
from fintrack.operations import add_record, add_subcategory
from fintrack.orchestrator import LedgerService
from fintrack.services.storage import InMemoryLedgerStorage


CREATED_AT = "2025-01-01T00:00:00+00:00"


class RecordingAuditLogger(AuditLogger):
    """Keeps events in a list instead of writing log lines."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event):
        self.events.append(event)

    def event_types(self):
        return [e.event_type.value for e in self.events]


def add(ledger, category, amount, day, subcategory="miscellaneous", description=""):
    """Add one record dated day-01-2025 and return the new ledger."""
    updated, _ = add_record(
        ledger,
        AddRecordRequest(
            category=category,
            amount=Decimal(str(amount)),
            subcategory=subcategory,
            description=description,
            date=datetime.date(2025, 1, day),
        ),
    )
    return updated


@pytest.fixture
def ledger():
    """A freshly initialized ledger."""
    return Ledger.new(currency=Currency.NGN, opening_balance=Decimal("1000"), now=CREATED_AT)


@pytest.fixture
def populated_ledger(ledger):
    """
    Opening 1000, three records added out of date order:
    income 500 (10th), income 300 (1st, Salary), expenses 200 (5th, Food).
    """
    ledger, _ = add_subcategory(ledger, AddSubcategoryRequest(name="food"))
    ledger, _ = add_subcategory(ledger, AddSubcategoryRequest(name="salary"))
    ledger = add(ledger, Category.INCOME, 500, 10)
    ledger = add(ledger, Category.INCOME, 300, 1, subcategory="salary")
    ledger = add(ledger, Category.EXPENSES, 200, 5, subcategory="food", description="groceries")
    return ledger


@pytest.fixture
def audit_logger():
    return RecordingAuditLogger()


@pytest.fixture
def memory_storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def service(memory_storage, audit_logger):
    return LedgerService(storage=memory_storage, audit_logger=audit_logger)
