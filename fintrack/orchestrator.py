"""
Service Layer for fintrack

This module ties together storage, the ledger operations, the query
engine and audit logging. Each public method is one command:
1. Mutations: load → operate → store
2. Queries: load → query
3. Lifecycle: init, clear, export, dump

DESIGN DECISION: The service enforces the boundaries:
- Nothing is written unless the operation succeeded
- A refused operation never touches the document
- Every change and every failure is audited

Operations and queries stay pure (ledger in, ledger out); this is the only
place that talks to storage.
"""

import json
from pathlib import Path
from typing import Callable, Optional, TypeVar
from uuid import UUID

from fintrack.audit import AuditLogger, create_correlation_id
from fintrack.config import get_settings
from fintrack.errors import LedgerIntegrityError, LedgerValidationError
from fintrack.models.ledger import Ledger, Record, Subcategory
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
    DeleteResult,
    DescribeResult,
    RecordListing,
    RenameResult,
    TotalResult,
)
from fintrack.operations import (
    add_record,
    add_subcategory,
    create_ledger,
    delete_records,
    delete_subcategory,
    reject_category_change,
    rename_subcategory,
    update_record,
)
from fintrack.queries import QueryExecutor
from fintrack.services.export import ExportError, ExportFileType, export_ledger
from fintrack.services.storage import (
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)


T = TypeVar("T")


class LedgerService:
    """
    One method per command, each a complete load/operate/store cycle.

    Nothing is cached between calls: every call reads the document fresh.
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage or JsonFileLedgerStorage()
        self._audit_logger = audit_logger

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def init(
        self,
        request: InitLedgerRequest,
        correlation_id: Optional[UUID] = None,
    ) -> Ledger:
        """
        Create a new ledger document.

        Raises:
            LedgerAlreadyInitializedError: a document already exists
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            ledger = create_ledger(request)
            self._storage.create(ledger)
        except LedgerValidationError as e:
            self._rejected("init", e, correlation_id)
            raise
        except StorageError as e:
            self._storage_failed("init", e, correlation_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_ledger_initialized(
                path=self._storage.path,
                currency=ledger.currency.value,
                opening_balance=ledger.opening_balance,
                correlation_id=correlation_id,
            )
        return ledger

    def clear(self, correlation_id: Optional[UUID] = None) -> Optional[Path]:
        """
        Remove the ledger document. Confirmation is the caller's job.

        Returns the path that was removed (None for non-file storage).
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            self._storage.delete()
        except StorageError as e:
            self._storage_failed("clear", e, correlation_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_ledger_cleared(
                path=self._storage.path,
                correlation_id=correlation_id,
            )
        return self._storage.path

    def dump(self, correlation_id: Optional[UUID] = None) -> str:
        """The raw document, pretty-printed, without building a Ledger."""
        correlation_id = correlation_id or create_correlation_id()
        try:
            document = self._storage.load_document()
        except StorageError as e:
            self._storage_failed("dump", e, correlation_id)
            raise
        return json.dumps(
            document,
            indent=get_settings().ledger.json_indent,
            ensure_ascii=False,
        )

    def export(
        self,
        directory: Path,
        file_type: ExportFileType = ExportFileType.JSON,
        correlation_id: Optional[UUID] = None,
    ) -> Path:
        """
        Write a CSV or JSON snapshot into directory.

        Raises:
            ExportError: directory missing or not writable
        """
        correlation_id = correlation_id or create_correlation_id()
        ledger = self._load("export", correlation_id)
        try:
            target = export_ledger(ledger, directory, file_type)
        except ExportError as e:
            self._rejected("export", e, correlation_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_ledger_exported(
                path=target,
                file_type=file_type.value,
                record_count=len(ledger.records),
                correlation_id=correlation_id,
            )
        return target

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def add_record(
        self,
        request: AddRecordRequest,
        correlation_id: Optional[UUID] = None,
    ) -> Record:
        correlation_id = correlation_id or create_correlation_id()
        record = self._mutate(
            "add",
            lambda ledger: add_record(ledger, request),
            correlation_id,
        )
        if self._audit_logger:
            self._audit_logger.log_record_added(
                record_id=record.id,
                category=record.category.label,
                amount=record.amount,
                correlation_id=correlation_id,
            )
        return record

    def update_record(
        self,
        request: UpdateRecordRequest,
        correlation_id: Optional[UUID] = None,
    ) -> Record:
        correlation_id = correlation_id or create_correlation_id()
        record = self._mutate(
            "update",
            lambda ledger: update_record(ledger, request),
            correlation_id,
        )
        if self._audit_logger:
            changed = [
                name
                for name in ("category", "amount", "subcategory", "description", "date")
                if getattr(request, name) is not None
            ]
            self._audit_logger.log_record_updated(
                record_id=record.id,
                changed_fields=changed,
                correlation_id=correlation_id,
            )
        return record

    def delete_records(
        self,
        request: DeleteRecordsRequest,
        correlation_id: Optional[UUID] = None,
    ) -> DeleteResult:
        """
        Delete by id set, category or subcategory.

        Ids that do not exist are ignored. When nothing matches, the
        document is left as it was.
        """
        correlation_id = correlation_id or create_correlation_id()
        ledger = self._load("delete", correlation_id)
        try:
            updated, result = delete_records(ledger, request)
        except LedgerValidationError as e:
            self._rejected("delete", e, correlation_id)
            raise

        if result.count:
            self._save("delete", updated, correlation_id)
            if self._audit_logger:
                if request.ids is not None:
                    selector = "ids"
                elif request.category is not None:
                    selector = f"category:{request.category.label}"
                else:
                    selector = f"subcategory:{request.subcategory}"
                self._audit_logger.log_records_deleted(
                    deleted_ids=result.deleted_ids,
                    selector=selector,
                    correlation_id=correlation_id,
                )
        return result

    # -------------------------------------------------------------------------
    # Subcategories / categories
    # -------------------------------------------------------------------------

    def add_subcategory(
        self,
        request: AddSubcategoryRequest,
        correlation_id: Optional[UUID] = None,
    ) -> Subcategory:
        correlation_id = correlation_id or create_correlation_id()
        subcategory = self._mutate(
            "subcategory add",
            lambda ledger: add_subcategory(ledger, request),
            correlation_id,
        )
        if self._audit_logger:
            self._audit_logger.log_subcategory_added(
                subcategory_id=subcategory.id,
                name=subcategory.name,
                correlation_id=correlation_id,
            )
        return subcategory

    def rename_subcategory(
        self,
        request: RenameSubcategoryRequest,
        correlation_id: Optional[UUID] = None,
    ) -> RenameResult:
        correlation_id = correlation_id or create_correlation_id()
        result = self._mutate(
            "subcategory rename",
            lambda ledger: rename_subcategory(ledger, request),
            correlation_id,
        )
        if self._audit_logger:
            self._audit_logger.log_subcategory_renamed(
                subcategory_id=result.subcategory.id,
                old_name=result.old_name,
                new_name=result.subcategory.name,
                correlation_id=correlation_id,
            )
        return result

    def delete_subcategory(
        self,
        request: DeleteSubcategoryRequest,
        correlation_id: Optional[UUID] = None,
    ) -> Subcategory:
        correlation_id = correlation_id or create_correlation_id()
        removed = self._mutate(
            "subcategory delete",
            lambda ledger: delete_subcategory(ledger, request),
            correlation_id,
        )
        if self._audit_logger:
            self._audit_logger.log_subcategory_deleted(
                subcategory_id=removed.id,
                name=removed.name,
                correlation_id=correlation_id,
            )
        return removed

    def change_category(
        self,
        action: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Categories cannot be added, renamed or deleted.

        Raises:
            CategoryImmutableError: always
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            reject_category_change(name)
        except LedgerValidationError as e:
            self._rejected(f"category {action}", e, correlation_id)
            raise

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_records(self, query: ListRecordsQuery) -> RecordListing:
        return self._query("list").list_records(query)

    def describe(self) -> DescribeResult:
        return self._query("describe").describe()

    def total(self) -> TotalResult:
        return self._query("total").total()

    def list_categories(self) -> list[tuple[int, str]]:
        return self._query("category list").list_categories()

    def list_subcategories(self) -> list[tuple[int, str]]:
        return self._query("subcategory list").list_subcategories()

    def subcategory_names(self) -> dict[int, str]:
        """id → name for rendering record listings."""
        return dict(self.list_subcategories())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _query(self, operation: str) -> QueryExecutor:
        return QueryExecutor(self._load(operation, None))

    def _mutate(
        self,
        operation: str,
        apply: Callable[[Ledger], tuple[Ledger, T]],
        correlation_id: Optional[UUID],
    ) -> T:
        ledger = self._load(operation, correlation_id)
        try:
            updated, result = apply(ledger)
        except LedgerValidationError as e:
            self._rejected(operation, e, correlation_id)
            raise
        self._save(operation, updated, correlation_id)
        return result

    def _load(self, operation: str, correlation_id: Optional[UUID]) -> Ledger:
        try:
            return self._storage.load()
        except StorageError as e:
            self._storage_failed(operation, e, correlation_id)
            raise

    def _save(self, operation: str, ledger: Ledger, correlation_id: Optional[UUID]) -> None:
        try:
            ledger.check_integrity()
        except LedgerIntegrityError as e:
            self._rejected(operation, e, correlation_id)
            raise
        try:
            self._storage.save(ledger)
        except StorageError as e:
            self._storage_failed(operation, e, correlation_id)
            raise

    def _rejected(self, operation: str, error: Exception, correlation_id: Optional[UUID]) -> None:
        if self._audit_logger:
            self._audit_logger.log_operation_rejected(
                operation=operation,
                error=error,
                correlation_id=correlation_id,
            )

    def _storage_failed(self, operation: str, error: Exception, correlation_id: Optional[UUID]) -> None:
        if self._audit_logger:
            self._audit_logger.log_storage_error(
                operation=operation,
                error=error,
                correlation_id=correlation_id,
            )


def create_app_components(
    storage: Optional[LedgerStorageInterface] = None,
) -> LedgerService:
    """
    Factory function to create the service with its collaborators.

    Args:
        storage: Storage backend. Defaults to the JSON file named by
                 the settings (FINTRACK_HOME_DIR etc).

    Returns:
        A LedgerService with audit logging enabled
    """
    return LedgerService(
        storage=storage or JsonFileLedgerStorage(),
        audit_logger=AuditLogger(),
    )
