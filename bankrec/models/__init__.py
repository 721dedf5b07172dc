"""Data models for the bank reconciliation system."""

from .enums import (
    AuditAction,
    ConfidenceLevel,
    FlowDirection,
    MatchStatus,
    StatementStatus,
    TransactionKind,
    TransactionStatus,
)
from .transaction import (
    StatementLine,
    Transaction,
)
from .reconciliation import (
    AuditEntry,
    AutoReconcileResult,
    MatchCandidate,
    OperationResult,
    Reconciliation,
    ReconciliationStats,
    ReconciliationSummary,
)

__all__ = [
    # Enums
    "AuditAction",
    "ConfidenceLevel",
    "FlowDirection",
    "MatchStatus",
    "StatementStatus",
    "TransactionKind",
    "TransactionStatus",
    # Records
    "StatementLine",
    "Transaction",
    # Reconciliation
    "AuditEntry",
    "AutoReconcileResult",
    "MatchCandidate",
    "OperationResult",
    "Reconciliation",
    "ReconciliationStats",
    "ReconciliationSummary",
]
