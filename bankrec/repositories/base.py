"""
Abstract repositories the reconciliation core depends on.

Implementations must raise NotFoundError for unknown ids, DataAccessError for
storage failures, and AlreadyConfirmedError when a write would break the
one-confirmed-match-per-statement-line / per-transaction constraint.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from ..models import (
    MatchStatus,
    Reconciliation,
    StatementLine,
    StatementStatus,
    Transaction,
    TransactionKind,
    TransactionStatus,
)


class TransactionRepository(ABC):
    """Read/write access to statement lines and receivables/payables."""

    @abstractmethod
    async def get_account_unit(self, account_id: str) -> str:
        """Return the unit that owns a bank account."""
        ...

    @abstractmethod
    async def list_statement_lines(self, account_id: str, limit: int) -> List[StatementLine]:
        """Up to `limit` statement lines of the account, any status."""
        ...

    @abstractmethod
    async def list_eligible_transactions(self, unit_id: str, limit: int) -> List[Transaction]:
        """Up to `limit` pending/scheduled receivables and payables of the unit."""
        ...

    @abstractmethod
    async def get_statement_line(self, statement_line_id: str) -> StatementLine:
        ...

    @abstractmethod
    async def get_transaction(self, kind: TransactionKind, transaction_id: str) -> Transaction:
        ...

    @abstractmethod
    async def update_statement_status(
        self,
        statement_line_id: str,
        status: StatementStatus,
    ) -> None:
        ...

    @abstractmethod
    async def update_transaction_status(
        self,
        kind: TransactionKind,
        transaction_id: str,
        status: TransactionStatus,
    ) -> None:
        ...


class ReconciliationRepository(ABC):
    """Persistence for reconciliation matches."""

    @abstractmethod
    async def create_match(self, match: Reconciliation) -> Reconciliation:
        ...

    @abstractmethod
    async def get_match(self, match_id: str) -> Reconciliation:
        ...

    @abstractmethod
    async def update_match_status(
        self,
        match_id: str,
        status: MatchStatus,
        confirmed_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> Reconciliation:
        """
        Write a new status. Writing CONFIRMED must be atomic with the
        uniqueness check on statement line and transaction.
        """
        ...

    @abstractmethod
    async def update_match_notes(self, match_id: str, notes: str) -> Reconciliation:
        ...

    @abstractmethod
    async def delete_match(self, match_id: str) -> None:
        ...

    @abstractmethod
    async def list_matches(
        self,
        statement_line_ids: Optional[List[str]] = None,
        status: Optional[MatchStatus] = None,
        transaction_type: Optional[TransactionKind] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Reconciliation]:
        """Matches filtered by the given criteria, newest first."""
        ...
