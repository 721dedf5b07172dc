"""
In-memory repositories.

Used by tests and by hosts that keep reconciliation state in process. Each
repository serializes writes with an asyncio.Lock so confirm races resolve to
exactly one winner.
"""

import asyncio
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..errors import AlreadyConfirmedError, InvalidTransitionError, NotFoundError
from ..models import (
    MatchStatus,
    Reconciliation,
    StatementLine,
    StatementStatus,
    Transaction,
    TransactionKind,
    TransactionStatus,
)
from .base import ReconciliationRepository, TransactionRepository


class InMemoryTransactionRepository(TransactionRepository):
    """Statement lines and receivables/payables held in dictionaries."""

    def __init__(self):
        self.accounts: Dict[str, str] = {}  # account_id -> unit_id
        self.statement_lines: Dict[str, StatementLine] = {}
        self.transactions: Dict[Tuple[TransactionKind, str], Transaction] = {}
        self._lock = asyncio.Lock()

    # Seeding (synchronous, for setup code)

    def add_account(self, account_id: str, unit_id: str) -> None:
        self.accounts[account_id] = unit_id

    def add_statement_lines(self, lines: Iterable[StatementLine]) -> None:
        for line in lines:
            self.statement_lines[line.id] = line

    def add_transactions(self, transactions: Iterable[Transaction]) -> None:
        for txn in transactions:
            self.transactions[(txn.kind, txn.id)] = txn

    # TransactionRepository

    async def get_account_unit(self, account_id: str) -> str:
        try:
            return self.accounts[account_id]
        except KeyError:
            raise NotFoundError("Bank account", account_id) from None

    async def list_statement_lines(self, account_id: str, limit: int) -> List[StatementLine]:
        lines = [
            replace(line) for line in self.statement_lines.values()
            if line.account_id == account_id
        ]
        lines.sort(key=lambda line: (line.transaction_date is None, line.transaction_date, line.id))
        return lines[:limit]

    async def list_eligible_transactions(self, unit_id: str, limit: int) -> List[Transaction]:
        transactions = [
            replace(txn) for txn in self.transactions.values()
            if txn.unit_id == unit_id and txn.is_eligible
        ]
        transactions.sort(key=lambda txn: (txn.kind.value, txn.id))
        return transactions[:limit]

    async def get_statement_line(self, statement_line_id: str) -> StatementLine:
        try:
            return replace(self.statement_lines[statement_line_id])
        except KeyError:
            raise NotFoundError("Statement line", statement_line_id) from None

    async def get_transaction(self, kind: TransactionKind, transaction_id: str) -> Transaction:
        try:
            return replace(self.transactions[(kind, transaction_id)])
        except KeyError:
            raise NotFoundError(kind.value, transaction_id) from None

    async def update_statement_status(
        self,
        statement_line_id: str,
        status: StatementStatus,
    ) -> None:
        async with self._lock:
            line = self.statement_lines.get(statement_line_id)
            if line is None:
                raise NotFoundError("Statement line", statement_line_id)
            line.reconciliation_status = status

    async def update_transaction_status(
        self,
        kind: TransactionKind,
        transaction_id: str,
        status: TransactionStatus,
    ) -> None:
        async with self._lock:
            txn = self.transactions.get((kind, transaction_id))
            if txn is None:
                raise NotFoundError(kind.value, transaction_id)
            txn.reconciliation_status = status


class InMemoryReconciliationRepository(ReconciliationRepository):
    """
    Matches held in a dictionary, with unique indices on confirmed matches
    per statement line and per transaction.
    """

    def __init__(self):
        self.matches: Dict[str, Reconciliation] = {}
        self._confirmed_by_statement: Dict[str, str] = {}
        self._confirmed_by_transaction: Dict[Tuple[TransactionKind, str], str] = {}
        self._lock = asyncio.Lock()

    def _get(self, match_id: str) -> Reconciliation:
        match = self.matches.get(match_id)
        if match is None:
            raise NotFoundError("Reconciliation", match_id)
        return match

    def _check_unique_confirmed(self, match: Reconciliation) -> None:
        holder = self._confirmed_by_statement.get(match.statement_line_id)
        if holder is not None and holder != match.id:
            raise AlreadyConfirmedError(
                f"Statement line {match.statement_line_id} is already reconciled",
                statement_line_id=match.statement_line_id,
                match_id=holder,
            )
        holder = self._confirmed_by_transaction.get((match.transaction_type, match.transaction_id))
        if holder is not None and holder != match.id:
            raise AlreadyConfirmedError(
                f"{match.transaction_type.value} {match.transaction_id} is already reconciled",
                transaction_id=match.transaction_id,
                match_id=holder,
            )

    def _index_confirmed(self, match: Reconciliation) -> None:
        self._confirmed_by_statement[match.statement_line_id] = match.id
        self._confirmed_by_transaction[(match.transaction_type, match.transaction_id)] = match.id

    async def create_match(self, match: Reconciliation) -> Reconciliation:
        async with self._lock:
            if match.status == MatchStatus.CONFIRMED:
                self._check_unique_confirmed(match)
                self._index_confirmed(match)
            self.matches[match.id] = replace(match)
            return replace(match)

    async def get_match(self, match_id: str) -> Reconciliation:
        return replace(self._get(match_id))

    async def update_match_status(
        self,
        match_id: str,
        status: MatchStatus,
        confirmed_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> Reconciliation:
        async with self._lock:
            match = self._get(match_id)
            if match.status == MatchStatus.CONFIRMED:
                raise AlreadyConfirmedError(
                    f"Reconciliation {match_id} was already confirmed",
                    match_id=match_id,
                )
            if match.status == MatchStatus.REJECTED:
                raise InvalidTransitionError(match_id, match.status.value, status.value)
            if status == MatchStatus.CONFIRMED:
                self._check_unique_confirmed(match)
                self._index_confirmed(match)
                match.confirmed_at = confirmed_at
            match.status = status
            if notes is not None:
                match.notes = notes
            return replace(match)

    async def update_match_notes(self, match_id: str, notes: str) -> Reconciliation:
        async with self._lock:
            match = self._get(match_id)
            match.notes = notes
            return replace(match)

    async def delete_match(self, match_id: str) -> None:
        async with self._lock:
            match = self._get(match_id)
            if match.status == MatchStatus.CONFIRMED:
                self._confirmed_by_statement.pop(match.statement_line_id, None)
                self._confirmed_by_transaction.pop(
                    (match.transaction_type, match.transaction_id), None
                )
            del self.matches[match_id]

    async def list_matches(
        self,
        statement_line_ids: Optional[List[str]] = None,
        status: Optional[MatchStatus] = None,
        transaction_type: Optional[TransactionKind] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Reconciliation]:
        wanted = set(statement_line_ids) if statement_line_ids is not None else None
        result = []
        for match in self.matches.values():
            if wanted is not None and match.statement_line_id not in wanted:
                continue
            if status is not None and match.status != status:
                continue
            if transaction_type is not None and match.transaction_type != transaction_type:
                continue
            created = match.created_at.date()
            if start_date is not None and created < start_date:
                continue
            if end_date is not None and created > end_date:
                continue
            result.append(replace(match))

        result.sort(key=lambda m: m.created_at, reverse=True)
        return result

    @property
    def confirmed_count(self) -> int:
        return len(self._confirmed_by_statement)
