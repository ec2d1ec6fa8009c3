"""
Audit Models for bizledger

Every fetch and every write against the remote store is recorded.
This provides:
1. Traceability of optimistic changes and their rollbacks
2. Debugging information when the store misbehaves
3. A history the UI can show next to a failure notice

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Reads
    PAGE_LOADED = "page_loaded"
    PAGE_LOAD_FAILED = "page_load_failed"
    STALE_PAGE_DISCARDED = "stale_page_discarded"
    RECORDS_DROPPED = "records_dropped"
    FILTERS_CHANGED = "filters_changed"
    CATEGORIES_LOADED = "categories_loaded"

    # Transaction writes
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_CREATE_ROLLED_BACK = "transaction_create_rolled_back"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_UPDATE_FAILED = "transaction_update_failed"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_DELETE_ROLLED_BACK = "transaction_delete_rolled_back"

    # Category writes
    CATEGORY_CREATED = "category_created"
    CATEGORY_DELETED = "category_deleted"
    CATEGORY_WRITE_FAILED = "category_write_failed"

    # Remote failures outside a mutation
    REMOTE_ERROR = "remote_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
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
        description="Type of entity ('transaction', 'category', 'page')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - ties an event to the mutation that caused it
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
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.page_loaded(kind, offset, accepted, has_more)
        event = AuditEventBuilder.transaction_created(temp_id, permanent_id, mutation_id)
    """

    @staticmethod
    def page_loaded(
        kind: str,
        offset: int,
        accepted: int,
        has_more: bool,
        reset: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAGE_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="page",
            description=f"Loaded {accepted} {kind} transactions at offset {offset}",
            details={
                "kind": kind,
                "offset": offset,
                "accepted": accepted,
                "has_more": has_more,
                "reset": reset,
            },
        )

    @staticmethod
    def page_load_failed(
        kind: str,
        offset: int,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAGE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="page",
            description=f"Loading {kind} transactions at offset {offset} failed",
            error_message=error_message,
            details={"kind": kind, "offset": offset},
        )

    @staticmethod
    def stale_page_discarded(
        generation: int,
        current_generation: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_PAGE_DISCARDED,
            severity=AuditSeverity.DEBUG,
            entity_type="page",
            description="Discarded a page fetched for superseded filters",
            details={
                "generation": generation,
                "current_generation": current_generation,
            },
        )

    @staticmethod
    def records_dropped(
        dropped: int,
        received: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_DROPPED,
            severity=AuditSeverity.WARNING,
            entity_type="page",
            description=f"Dropped {dropped} of {received} malformed transaction records",
            details={"dropped": dropped, "received": received},
        )

    @staticmethod
    def filters_changed(
        kind: str,
        search: Optional[str],
        date_range: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILTERS_CHANGED,
            severity=AuditSeverity.DEBUG,
            description="Transaction filters changed",
            details={"kind": kind, "search": search, "date_range": date_range},
        )

    @staticmethod
    def categories_loaded(
        income_count: int,
        expense_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="category",
            description=f"Loaded {income_count} income and {expense_count} expense categories",
            details={"income": income_count, "expense": expense_count},
        )

    @staticmethod
    def transaction_created(
        temp_id: str,
        transaction_id: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} created ({amount})",
            details={"temp_id": temp_id, "amount": amount},
        )

    @staticmethod
    def transaction_create_rolled_back(
        temp_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATE_ROLLED_BACK,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=temp_id,
            correlation_id=correlation_id,
            description="Create failed; placeholder removed",
            error_message=error_message,
        )

    @staticmethod
    def transaction_updated(
        transaction_id: str,
        variant: str,
        fields: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} updated",
            details={"response": variant, "fields": fields},
        )

    @staticmethod
    def transaction_update_failed(
        transaction_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Update of transaction {transaction_id} failed",
            error_message=error_message,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} deleted",
        )

    @staticmethod
    def transaction_delete_rolled_back(
        transaction_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETE_ROLLED_BACK,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Delete of transaction {transaction_id} failed; view restored",
            error_message=error_message,
        )

    @staticmethod
    def category_created(
        category_id: str,
        name: str,
        kind: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_CREATED,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category created: {name}",
            details={"kind": kind},
        )

    @staticmethod
    def category_deleted(
        category_id: str,
        kind: str,
        removed_transactions: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_DELETED,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category {category_id} deleted with {removed_transactions} transactions",
            details={"kind": kind, "removed_transactions": removed_transactions},
        )

    @staticmethod
    def category_write_failed(
        category_id: Optional[str],
        operation: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_WRITE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category {operation} failed",
            error_message=error_message,
        )

    @staticmethod
    def remote_error(
        operation: str,
        error_message: str,
        status_code: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Remote store error during {operation}",
            error_message=error_message,
            details={"operation": operation, "status_code": status_code},
            correlation_id=correlation_id,
        )
