"""Reconciliation match and result models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Union
from uuid import uuid4

from .enums import (
    AuditAction,
    ConfidenceLevel,
    MatchStatus,
    TransactionKind,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MatchCandidate:
    """
    A scored pairing between one statement line and one transaction.
    Produced by the candidate generator; the resolver returns the winners.
    """
    statement_line_id: str
    transaction_id: str
    transaction_type: TransactionKind

    amount_difference_cents: int = 0
    date_difference_days: int = 0
    confidence_score: int = 0

    # Descriptive only, never used for ranking
    text_similarity: float = 0.0
    match_reason: str = ""

    @property
    def amount_difference(self) -> float:
        return self.amount_difference_cents / 100.0

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_score(self.confidence_score)

    @property
    def is_exact(self) -> bool:
        return self.amount_difference_cents == 0 and self.date_difference_days == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statement_line_id": self.statement_line_id,
            "transaction_id": self.transaction_id,
            "transaction_type": self.transaction_type.value,
            "amount_difference": self.amount_difference,
            "date_difference_days": self.date_difference_days,
            "confidence_score": self.confidence_score,
            "confidence_level": self.confidence_level.value,
            "text_similarity": round(self.text_similarity, 4),
            "match_reason": self.match_reason,
        }


@dataclass
class Reconciliation:
    """The persisted link between a statement line and a transaction."""
    id: str = field(default_factory=lambda: str(uuid4()))

    statement_line_id: str = ""
    transaction_id: str = ""
    transaction_type: TransactionKind = TransactionKind.RECEIVABLE

    # Signed for manual links (over/under payment), >= 0 for auto matches
    amount_difference_cents: int = 0
    date_difference_days: int = 0
    confidence_score: int = 0

    status: MatchStatus = MatchStatus.PENDING

    # Audit
    created_at: datetime = field(default_factory=utcnow)
    confirmed_at: Optional[datetime] = None
    matched_by: str = "auto"  # "auto" or "manual"
    notes: str = ""

    @property
    def amount_difference(self) -> float:
        return self.amount_difference_cents / 100.0

    @property
    def is_confirmed(self) -> bool:
        return self.status == MatchStatus.CONFIRMED

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_score(self.confidence_score)

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate, notes: str = "") -> "Reconciliation":
        """Build a proposal; a nonzero amount difference makes it divergent."""
        status = MatchStatus.DIVERGENT if candidate.amount_difference_cents else MatchStatus.PENDING
        return cls(
            statement_line_id=candidate.statement_line_id,
            transaction_id=candidate.transaction_id,
            transaction_type=candidate.transaction_type,
            amount_difference_cents=candidate.amount_difference_cents,
            date_difference_days=candidate.date_difference_days,
            confidence_score=candidate.confidence_score,
            status=status,
            notes=notes or candidate.match_reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "statement_line_id": self.statement_line_id,
            "transaction_id": self.transaction_id,
            "transaction_type": self.transaction_type.value,
            "amount_difference": self.amount_difference,
            "date_difference_days": self.date_difference_days,
            "confidence_score": self.confidence_score,
            "confidence_level": self.confidence_level.value,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "matched_by": self.matched_by,
            "notes": self.notes,
        }


@dataclass
class ReconciliationSummary:
    """Counts reported by one auto-reconcile run."""
    total_statements: int = 0
    total_transactions: int = 0
    matches_found: int = 0
    already_reconciled: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_statements": self.total_statements,
            "total_transactions": self.total_transactions,
            "matches_found": self.matches_found,
            "already_reconciled": self.already_reconciled,
        }


@dataclass
class AutoReconcileResult:
    """Proposed matches plus run summary."""
    matches: List[Union[MatchCandidate, Reconciliation]] = field(default_factory=list)
    summary: ReconciliationSummary = field(default_factory=ReconciliationSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": [m.to_dict() for m in self.matches],
            "summary": self.summary.to_dict(),
        }


@dataclass
class ReconciliationStats:
    """Aggregated reconciliation figures for an account."""
    total_statements: int = 0
    total_reconciled: int = 0
    total_pending: int = 0

    # Amounts (in cents, absolute values)
    total_amount_cents: int = 0
    reconciled_amount_cents: int = 0
    pending_amount_cents: int = 0
    divergent_amount_cents: int = 0

    @property
    def reconciliation_percentage(self) -> int:
        if self.total_statements == 0:
            return 0
        return round((self.total_reconciled / self.total_statements) * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_statements": self.total_statements,
            "total_reconciled": self.total_reconciled,
            "total_pending": self.total_pending,
            "reconciliation_percentage": self.reconciliation_percentage,
            "total_amount": self.total_amount_cents / 100.0,
            "reconciled_amount": self.reconciled_amount_cents / 100.0,
            "pending_amount": self.pending_amount_cents / 100.0,
            "divergent_amount": self.divergent_amount_cents / 100.0,
        }


@dataclass
class AuditEntry:
    """An entry in the audit log."""
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utcnow)

    # Action
    action: AuditAction = AuditAction.MATCH_PROPOSED

    # Context
    match_id: Optional[str] = None
    statement_line_id: Optional[str] = None
    transaction_id: Optional[str] = None

    # Details
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    # Outcome
    success: bool = True
    error_message: Optional[str] = None


@dataclass
class OperationResult:
    """Uniform envelope returned by every public operation."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, error_code: Optional[str] = None) -> "OperationResult":
        return cls(success=False, error=error, error_code=error_code)

    def to_dict(self) -> Dict[str, Any]:
        data = self.data
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        elif isinstance(data, list):
            data = [d.to_dict() if hasattr(d, "to_dict") else d for d in data]
        return {
            "success": self.success,
            "data": data,
            "error": self.error,
            "error_code": self.error_code,
        }
