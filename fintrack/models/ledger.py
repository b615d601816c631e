"""
Core Ledger Models for fintrack

These models define the entities that make up the persisted ledger:
categories, subcategories, records and the Ledger aggregate that owns them.
They are designed to:
1. Enforce type safety at runtime
2. Round-trip the on-disk JSON document field for field
3. Keep the subcategory indexes consistent with each other
4. Expose the lookups the operations and queries need

DESIGN DECISION: Categories are a closed IntEnum, not a dynamic map.
There are exactly two of them and they can never change at runtime, so
the document's "categories" object is derived from the enum on write and
checked against it on read.
"""

from datetime import date
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from fintrack.errors import (
    InvalidCategoryError,
    InvalidCurrencyError,
    LedgerIntegrityError,
)
from fintrack.utils.dates import try_parse_date, utc_now_rfc3339


LEDGER_VERSION = 1

MISCELLANEOUS_ID = 1
MISCELLANEOUS_NAME = "Miscellaneous"
MISCELLANEOUS_KEY = "miscellaneous"


def lookup_key(name: str) -> str:
    """Case- and whitespace-insensitive subcategory key."""
    return " ".join(name.split()).lower()


def _to_decimal(value: Any) -> Any:
    """JSON floats go through repr so 100.1 stays Decimal('100.1')."""
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(IntEnum):
    """
    The two fixed transaction types.

    The numeric value is the id stored on every record.
    """
    INCOME = 1
    EXPENSES = 2

    @property
    def label(self) -> str:
        """Canonical lowercase name used in the document."""
        return self.name.lower()

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_name(cls, name: str) -> "Category":
        """Case-insensitive lookup by name."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise InvalidCategoryError(name) from None

    @classmethod
    def document_map(cls) -> dict[str, int]:
        return {member.label: member.value for member in cls}


class Currency(str, Enum):
    """Supported currency codes."""
    NGN = "NGN"
    USD = "USD"
    GBP = "GBP"
    EUR = "EUR"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"

    @classmethod
    def from_code(cls, code: str) -> "Currency":
        """Case-insensitive lookup by ISO code."""
        try:
            return cls(code.strip().upper())
        except ValueError:
            raise InvalidCurrencyError(code, [c.value for c in cls]) from None


# =============================================================================
# ENTITIES
# =============================================================================

class Subcategory(BaseModel):
    """A user-managed sub-classification of records."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)

    @property
    def key(self) -> str:
        """Lookup key, see lookup_key."""
        return lookup_key(self.name)

    @property
    def is_reserved(self) -> bool:
        return self.id == MISCELLANEOUS_ID


class Record(BaseModel):
    """
    One income or expense transaction.

    The amount is always positive. Whether it adds to or subtracts from
    the balance is decided by the category at aggregation time.

    The date is kept as the stored DD-MM-YYYY string. A hand-edited
    document may contain a date that does not parse; such records are
    kept but never show up in date-filtered or date-sorted results.
    """

    id: int = Field(..., ge=1)
    category: Category
    subcategory: int = Field(..., ge=1)
    description: str = ""
    amount: Decimal = Field(..., gt=0)
    date: str

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        return _to_decimal(v)

    @field_serializer('amount')
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)

    @field_serializer('category')
    def serialize_category(self, category: Category) -> int:
        return int(category)

    @property
    def parsed_date(self) -> Optional[date]:
        return try_parse_date(self.date)

    @property
    def signed_amount(self) -> Decimal:
        """Amount with its effect on the balance applied."""
        return self.amount if self.category == Category.INCOME else -self.amount


# =============================================================================
# LEDGER AGGREGATE
# =============================================================================

class Ledger(BaseModel):
    """
    The whole persisted financial document.

    CRITICAL: subcategories_by_id and subcategories_by_name are two views
    of the same index. They are only ever changed through the
    _register/_rename/_remove helpers below, which update both at once.

    Counters are fields of the document rather than process state, so every
    invocation derives them fresh from what it loaded.
    """

    model_config = ConfigDict(validate_assignment=True)

    version: int = LEDGER_VERSION
    currency: Currency
    created_at: str
    last_modified: str
    opening_balance: Decimal = Decimal("0")
    subcategories_by_id: dict[int, str] = Field(default_factory=dict)
    subcategories_by_name: dict[str, int] = Field(default_factory=dict)
    next_subcategory_id: int = Field(default=MISCELLANEOUS_ID + 1, ge=1)
    records: list[Record] = Field(default_factory=list)
    next_record_id: int = Field(default=1, ge=1)

    @field_validator('opening_balance', mode='before')
    @classmethod
    def coerce_opening_balance(cls, v: Any) -> Any:
        return _to_decimal(v)

    # -------------------------------------------------------------------------
    # Construction / serialization
    # -------------------------------------------------------------------------

    @classmethod
    def new(
        cls,
        currency: Currency = Currency.NGN,
        opening_balance: Decimal = Decimal("0"),
        now: Optional[str] = None,
    ) -> "Ledger":
        """Build a freshly initialized ledger with the default subcategory."""
        timestamp = now or utc_now_rfc3339()
        return cls(
            currency=currency,
            created_at=timestamp,
            last_modified=timestamp,
            opening_balance=opening_balance,
            subcategories_by_id={MISCELLANEOUS_ID: MISCELLANEOUS_NAME},
            subcategories_by_name={MISCELLANEOUS_KEY: MISCELLANEOUS_ID},
            next_subcategory_id=MISCELLANEOUS_ID + 1,
            records=[],
            next_record_id=1,
        )

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Ledger":
        """
        Build a Ledger from the deserialized JSON document.

        Raises:
            LedgerIntegrityError: if the document is structurally invalid
                or violates a ledger invariant
        """
        if not isinstance(document, dict):
            raise LedgerIntegrityError(["document is not a JSON object"])

        categories = document.get("categories")
        expected = Category.document_map()
        if categories is not None:
            normalized = {}
            if isinstance(categories, dict):
                normalized = {str(k).lower(): v for k, v in categories.items()}
            if normalized != expected:
                raise LedgerIntegrityError(
                    [f"categories must be {expected}, found {categories}"]
                )

        fields = {k: v for k, v in document.items() if k != "categories"}
        by_name = fields.get("subcategories_by_name")
        if isinstance(by_name, dict):
            # hand-edited keys may carry extra spaces or capitals
            fields["subcategories_by_name"] = {
                lookup_key(str(key)): sub_id for key, sub_id in by_name.items()
            }
        try:
            ledger = cls.model_validate(fields)
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise LedgerIntegrityError(problems) from e

        ledger.check_integrity()
        return ledger

    def to_document(self) -> dict[str, Any]:
        """Serialize to the exact on-disk document shape."""
        return {
            "version": self.version,
            "currency": self.currency.value,
            "created_at": self.created_at,
            "last_modified": self.last_modified,
            "opening_balance": float(self.opening_balance),
            "categories": Category.document_map(),
            "subcategories_by_id": {
                str(sub_id): name for sub_id, name in self.subcategories_by_id.items()
            },
            "subcategories_by_name": dict(self.subcategories_by_name),
            "next_subcategory_id": self.next_subcategory_id,
            "records": [record.model_dump() for record in self.records],
            "next_record_id": self.next_record_id,
        }

    def touch(self, now: Optional[str] = None) -> None:
        """Refresh last_modified."""
        self.last_modified = now or utc_now_rfc3339()

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def category_id(self, name: str) -> int:
        """
        Exact lookup in the fixed category map.

        Callers validate the name upstream; an unknown name is a
        programming error and raises KeyError.
        """
        return Category.document_map()[name.lower()]

    def category_name(self, category_id: int) -> Optional[str]:
        try:
            return Category(category_id).label
        except ValueError:
            return None

    def subcategory_id(self, name: str) -> Optional[int]:
        """Case-insensitive lookup; None when the name is unknown."""
        return self.subcategories_by_name.get(lookup_key(name))

    def subcategory_name(self, subcategory_id: int) -> Optional[str]:
        return self.subcategories_by_id.get(subcategory_id)

    @property
    def subcategories(self) -> list[Subcategory]:
        """All subcategories ordered by id."""
        return [
            Subcategory(id=sub_id, name=name)
            for sub_id, name in sorted(self.subcategories_by_id.items())
        ]

    def find_record(self, record_id: int) -> Optional[Record]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def count_records_in_subcategory(self, subcategory_id: int) -> int:
        return sum(1 for r in self.records if r.subcategory == subcategory_id)

    def totals(self) -> tuple[Decimal, Decimal]:
        """Return (income_sum, expenses_sum) in a single pass."""
        income = Decimal("0")
        expenses = Decimal("0")
        for record in self.records:
            if record.category == Category.INCOME:
                income += record.amount
            elif record.category == Category.EXPENSES:
                expenses += record.amount
        return income, expenses

    # -------------------------------------------------------------------------
    # Subcategory index maintenance (both maps, always together)
    # -------------------------------------------------------------------------

    def _register_subcategory(self, name: str, key: str) -> Subcategory:
        sub_id = self.next_subcategory_id
        by_id = dict(self.subcategories_by_id)
        by_name = dict(self.subcategories_by_name)
        by_id[sub_id] = name
        by_name[key] = sub_id
        self.subcategories_by_id = by_id
        self.subcategories_by_name = by_name
        self.next_subcategory_id = sub_id + 1
        return Subcategory(id=sub_id, name=name)

    def _rename_subcategory(self, sub_id: int, new_name: str, key: str) -> Subcategory:
        old_name = self.subcategories_by_id[sub_id]
        by_id = dict(self.subcategories_by_id)
        by_name = dict(self.subcategories_by_name)
        by_name.pop(lookup_key(old_name), None)
        by_id[sub_id] = new_name
        by_name[key] = sub_id
        self.subcategories_by_id = by_id
        self.subcategories_by_name = by_name
        return Subcategory(id=sub_id, name=new_name)

    def _remove_subcategory(self, sub_id: int) -> Subcategory:
        name = self.subcategories_by_id[sub_id]
        by_id = dict(self.subcategories_by_id)
        by_name = dict(self.subcategories_by_name)
        del by_id[sub_id]
        by_name.pop(lookup_key(name), None)
        self.subcategories_by_id = by_id
        self.subcategories_by_name = by_name
        return Subcategory(id=sub_id, name=name)

    # -------------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------------

    def integrity_problems(self) -> list[str]:
        """List every violated invariant (empty when the ledger is sound)."""
        problems = []

        if lookup_key(self.subcategories_by_id.get(MISCELLANEOUS_ID, "")) != MISCELLANEOUS_KEY:
            problems.append("the Miscellaneous subcategory must exist with id 1")

        if len(self.subcategories_by_id) != len(self.subcategories_by_name):
            problems.append(
                "subcategory indexes differ in size "
                f"({len(self.subcategories_by_id)} by id, "
                f"{len(self.subcategories_by_name)} by name)"
            )
        for sub_id, name in self.subcategories_by_id.items():
            if self.subcategories_by_name.get(lookup_key(name)) != sub_id:
                problems.append(f"subcategory {sub_id} ('{name}') missing from name index")
        for key, sub_id in self.subcategories_by_name.items():
            name = self.subcategories_by_id.get(sub_id)
            if name is None or lookup_key(name) != key:
                problems.append(f"name index entry '{key}' points at unknown id {sub_id}")

        if self.subcategories_by_id and self.next_subcategory_id <= max(self.subcategories_by_id):
            problems.append("next_subcategory_id must exceed every subcategory id")

        seen_ids = set()
        for record in self.records:
            if record.id in seen_ids:
                problems.append(f"duplicate record id {record.id}")
            seen_ids.add(record.id)
            if record.subcategory not in self.subcategories_by_id:
                problems.append(
                    f"record {record.id} references unknown subcategory {record.subcategory}"
                )
        if seen_ids and self.next_record_id <= max(seen_ids):
            problems.append("next_record_id must exceed every record id")

        return problems

    def check_integrity(self) -> None:
        """
        Raise LedgerIntegrityError if any invariant is violated.

        Category ids need no check here: Record.category is a Category,
        so only 1 and 2 can ever be loaded.
        """
        problems = self.integrity_problems()
        if problems:
            raise LedgerIntegrityError(problems)
