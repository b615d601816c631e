"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Traceability of which command changed the document
2. Debugging capability when a command is refused
3. Correlation IDs tying together the events of one invocation

The audit logger:
- Is synchronous: one command runs one load/mutate/store cycle
- Writes structured lines through structlog to stderr
- Never writes into the ledger document itself
"""

import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Optional
from uuid import UUID, uuid4

import structlog

from fintrack.config import AppSettings, get_settings
from fintrack.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


LOGGER_NAME = "fintrack"

_handler: Optional[logging.Handler] = None


def configure_logging(app_settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog and the stdlib "fintrack" logger.

    Safe to call more than once; the handler installed by a previous call
    is replaced so output follows the current sys.stderr.
    """
    global _handler
    app = app_settings or get_settings().app

    renderer = (
        structlog.processors.JSONRenderer()
        if app.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    stdlib_logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        stdlib_logger.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    stdlib_logger.addHandler(_handler)
    stdlib_logger.setLevel(logging.DEBUG if app.debug_mode else app.log_level)


class AuditLogger:
    """
    Central audit logging service.

    Each AuditEvent becomes one structured log line whose level follows
    the event severity.
    """

    def __init__(self, logger_name: str = f"{LOGGER_NAME}.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_ledger_initialized(
        self,
        path: Optional[Path],
        currency: str,
        opening_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ledger_initialized(
            path=str(path),
            currency=currency,
            opening_balance=str(opening_balance),
            correlation_id=correlation_id,
        ))

    def log_ledger_cleared(
        self,
        path: Optional[Path],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ledger_cleared(
            path=str(path),
            correlation_id=correlation_id,
        ))

    def log_ledger_exported(
        self,
        path: Path,
        file_type: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ledger_exported(
            path=str(path),
            file_type=file_type,
            record_count=record_count,
            correlation_id=correlation_id,
        ))

    def log_record_added(
        self,
        record_id: int,
        category: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_added(
            record_id=record_id,
            category=category,
            amount=str(amount),
            correlation_id=correlation_id,
        ))

    def log_record_updated(
        self,
        record_id: int,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_updated(
            record_id=record_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_records_deleted(
        self,
        deleted_ids: list[int],
        selector: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.records_deleted(
            deleted_ids=deleted_ids,
            selector=selector,
            correlation_id=correlation_id,
        ))

    def log_subcategory_added(
        self,
        subcategory_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subcategory_added(
            subcategory_id=subcategory_id,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_subcategory_renamed(
        self,
        subcategory_id: int,
        old_name: str,
        new_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subcategory_renamed(
            subcategory_id=subcategory_id,
            old_name=old_name,
            new_name=new_name,
            correlation_id=correlation_id,
        ))

    def log_subcategory_deleted(
        self,
        subcategory_id: int,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subcategory_deleted(
            subcategory_id=subcategory_id,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_operation_rejected(
        self,
        operation: str,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a request the ledger refused (validation failure)."""
        self.log(AuditEventBuilder.operation_rejected(
            operation=operation,
            error=error,
            correlation_id=correlation_id,
        ))

    def log_storage_error(
        self,
        operation: str,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failure to read or write the document."""
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error=error,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One per command invocation; pass it to every audit call it makes.
    """
    return uuid4()
