"""
Data Models Package

This package contains all Pydantic models used by bizledger.
Everything the state engine holds or exchanges with the remote store
conforms to these schemas.
"""

from bizledger.models.finance import (
    Category,
    CategoryDraft,
    DateRange,
    FilterParams,
    FinancialSummary,
    LoadResult,
    LoadStatus,
    MonthlyTrendPoint,
    Transaction,
    TransactionDraft,
    TransactionKind,
    TransactionPatch,
)
from bizledger.models.mutation import (
    FullRecordResponse,
    InvalidTransitionError,
    MutationOperation,
    MutationRecord,
    MutationState,
    PatchResponse,
    UpdateResponse,
)
from bizledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "Category",
    "CategoryDraft",
    "DateRange",
    "FilterParams",
    "FinancialSummary",
    "LoadResult",
    "LoadStatus",
    "MonthlyTrendPoint",
    "Transaction",
    "TransactionDraft",
    "TransactionKind",
    "TransactionPatch",
    # Mutation models
    "FullRecordResponse",
    "InvalidTransitionError",
    "MutationOperation",
    "MutationRecord",
    "MutationState",
    "PatchResponse",
    "UpdateResponse",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
