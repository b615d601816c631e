"""
Audit Models for fintrack

Every mutation of the ledger, and every rejected request, produces an
audit event. This provides:
1. Traceability of what changed the document and when
2. Debugging information when a command fails
3. A record of refused operations and why

DESIGN DECISION: Audit events are structured log lines only. They are
not persisted next to the ledger: there is no transaction log.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutating ledger operation has its own event type.
    """
    # Ledger lifecycle
    LEDGER_INITIALIZED = "ledger_initialized"
    LEDGER_CLEARED = "ledger_cleared"
    LEDGER_EXPORTED = "ledger_exported"

    # Records
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORDS_DELETED = "records_deleted"

    # Subcategories
    SUBCATEGORY_ADDED = "subcategory_added"
    SUBCATEGORY_RENAMED = "subcategory_renamed"
    SUBCATEGORY_DELETED = "subcategory_deleted"

    # Failures
    OPERATION_REJECTED = "operation_rejected"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'record', 'subcategory', 'ledger')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - ties together the events of one command invocation
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added(record_id, "income", "500", correlation_id)
        event = AuditEventBuilder.operation_rejected("add", error, correlation_id)
    """

    @staticmethod
    def ledger_initialized(
        path: str,
        currency: str,
        opening_balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_INITIALIZED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger initialized at {path}",
            details={
                "path": path,
                "currency": currency,
                "opening_balance": opening_balance,
            },
        )

    @staticmethod
    def ledger_cleared(
        path: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger removed from {path}",
            details={"path": path},
        )

    @staticmethod
    def ledger_exported(
        path: str,
        file_type: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_EXPORTED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger exported as {file_type} to {path}",
            details={
                "path": path,
                "file_type": file_type,
                "record_count": record_count,
            },
        )

    @staticmethod
    def record_added(
        record_id: int,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record {record_id} added ({category} {amount})",
            details={
                "category": category,
                "amount": amount,
            },
        )

    @staticmethod
    def record_updated(
        record_id: int,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record {record_id} updated",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def records_deleted(
        deleted_ids: list[int],
        selector: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_DELETED,
            entity_type="record",
            correlation_id=correlation_id,
            description=f"{len(deleted_ids)} record(s) deleted by {selector}",
            details={
                "deleted_ids": deleted_ids,
                "selector": selector,
            },
        )

    @staticmethod
    def subcategory_added(
        subcategory_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBCATEGORY_ADDED,
            entity_type="subcategory",
            entity_id=subcategory_id,
            correlation_id=correlation_id,
            description=f"Subcategory '{name}' added",
            details={"name": name},
        )

    @staticmethod
    def subcategory_renamed(
        subcategory_id: int,
        old_name: str,
        new_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBCATEGORY_RENAMED,
            entity_type="subcategory",
            entity_id=subcategory_id,
            correlation_id=correlation_id,
            description=f"Subcategory '{old_name}' renamed to '{new_name}'",
            details={
                "old_name": old_name,
                "new_name": new_name,
            },
        )

    @staticmethod
    def subcategory_deleted(
        subcategory_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBCATEGORY_DELETED,
            entity_type="subcategory",
            entity_id=subcategory_id,
            correlation_id=correlation_id,
            description=f"Subcategory '{name}' deleted",
            details={"name": name},
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} rejected",
            details={"operation": operation},
            error_code=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def storage_error(
        operation: str,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Storage failure during {operation}",
            details={"operation": operation},
            error_code=type(error).__name__,
            error_message=str(error),
        )
