"""Enumerations for the bank reconciliation system."""

from enum import Enum


class StatementStatus(str, Enum):
    """Reconciliation status of a bank statement line."""
    PENDING = "pending"
    RECONCILED = "reconciled"


class TransactionStatus(str, Enum):
    """Reconciliation status of a receivable/payable."""
    PENDING = "pending"
    SCHEDULED = "scheduled"
    RECONCILED = "reconciled"


class MatchStatus(str, Enum):
    """
    Status of a reconciliation match.

    PENDING: Proposed by auto-match, awaiting review
    DIVERGENT: Proposed with a nonzero amount difference, awaiting review
    CONFIRMED: Accepted, terminal
    REJECTED: Discarded, terminal
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DIVERGENT = "divergent"
    REJECTED = "rejected"

    @property
    def is_open(self) -> bool:
        """Whether the match still awaits a human decision."""
        return self in (MatchStatus.PENDING, MatchStatus.DIVERGENT)

    @property
    def is_terminal(self) -> bool:
        return self in (MatchStatus.CONFIRMED, MatchStatus.REJECTED)


class TransactionKind(str, Enum):
    """Kind of expected cash movement."""
    RECEIVABLE = "Receivable"  # Money expected in (revenue)
    PAYABLE = "Payable"        # Money expected out (expense)


class FlowDirection(str, Enum):
    """Direction of a cash movement."""
    INFLOW = "inflow"      # Credit on the statement
    OUTFLOW = "outflow"    # Debit on the statement


class ConfidenceLevel(str, Enum):
    """Human-facing label for a 0-100 confidence score."""
    EXACT = "exact"    # 95+
    HIGH = "high"      # 85+
    MEDIUM = "medium"  # 70+
    LOW = "low"

    @classmethod
    def from_score(cls, score: int) -> "ConfidenceLevel":
        if score >= 95:
            return cls.EXACT
        if score >= 85:
            return cls.HIGH
        if score >= 70:
            return cls.MEDIUM
        return cls.LOW


class AuditAction(str, Enum):
    """Type of audit action."""
    RUN_STARTED = "run_started"
    RUN_COMPLETED = "run_completed"
    VALIDATION_FAILED = "validation_failed"
    MATCH_PROPOSED = "match_proposed"
    MATCH_CONFIRMED = "match_confirmed"
    MATCH_REJECTED = "match_rejected"
    MANUAL_LINK = "manual_link"
    CONFIRM_INCOMPLETE = "confirm_incomplete"
    NOTES_UPDATED = "notes_updated"
