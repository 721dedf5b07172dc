"""Statement line and transaction models for the reconciliation system."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Dict, Any
from uuid import uuid4

from .enums import (
    FlowDirection,
    StatementStatus,
    TransactionKind,
    TransactionStatus,
)


@dataclass
class StatementLine:
    """
    One entry of an imported bank statement.
    Amounts are stored in CENTS (signed integer): positive = credit, negative = debit.
    """
    id: str = field(default_factory=lambda: str(uuid4()))
    account_id: str = ""

    transaction_date: Optional[date] = None
    amount_cents: int = 0
    description: str = ""

    reconciliation_status: StatementStatus = StatementStatus.PENDING

    @property
    def amount(self) -> float:
        """Return amount in standard currency units."""
        return self.amount_cents / 100.0

    @property
    def is_credit(self) -> bool:
        return self.amount_cents > 0

    @property
    def flow_direction(self) -> FlowDirection:
        return FlowDirection.INFLOW if self.is_credit else FlowDirection.OUTFLOW

    @property
    def is_reconciled(self) -> bool:
        return self.reconciliation_status == StatementStatus.RECONCILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "account_id": self.account_id,
            "transaction_date": self.transaction_date.isoformat() if self.transaction_date else None,
            "amount_cents": self.amount_cents,
            "amount": self.amount,
            "description": self.description,
            "reconciliation_status": self.reconciliation_status.value,
        }


@dataclass
class Transaction:
    """
    An expected cash movement (receivable or payable) recorded independently
    of the bank feed. Amounts in CENTS.
    """
    id: str = field(default_factory=lambda: str(uuid4()))
    unit_id: str = ""
    account_id: Optional[str] = None

    kind: TransactionKind = TransactionKind.RECEIVABLE
    expected_amount_cents: int = 0

    # Temporal
    expected_date: Optional[date] = None
    nominal_date: Optional[date] = None
    actual_settlement_date: Optional[date] = None

    # Descriptive only
    counterparty_name: Optional[str] = None
    description: str = ""

    reconciliation_status: TransactionStatus = TransactionStatus.PENDING

    @property
    def amount(self) -> float:
        """Return expected amount in standard currency units."""
        return self.expected_amount_cents / 100.0

    @property
    def reference_date(self) -> Optional[date]:
        """Date used for matching: expected date, falling back to the nominal date."""
        return self.expected_date or self.nominal_date

    @property
    def flow_direction(self) -> FlowDirection:
        if self.kind == TransactionKind.RECEIVABLE:
            return FlowDirection.INFLOW
        return FlowDirection.OUTFLOW

    @property
    def is_eligible(self) -> bool:
        """Check if this transaction can still be matched."""
        return self.reconciliation_status in (
            TransactionStatus.PENDING,
            TransactionStatus.SCHEDULED,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "account_id": self.account_id,
            "kind": self.kind.value,
            "expected_amount_cents": self.expected_amount_cents,
            "amount": self.amount,
            "expected_date": self.expected_date.isoformat() if self.expected_date else None,
            "nominal_date": self.nominal_date.isoformat() if self.nominal_date else None,
            "actual_settlement_date": (
                self.actual_settlement_date.isoformat() if self.actual_settlement_date else None
            ),
            "counterparty_name": self.counterparty_name,
            "description": self.description,
            "reconciliation_status": self.reconciliation_status.value,
        }
