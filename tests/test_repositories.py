"""
Tests for the in-memory repositories.
"""

import pytest
from datetime import date, datetime, timezone

from bankrec.errors import AlreadyConfirmedError, InvalidTransitionError, NotFoundError
from bankrec.models import (
    MatchStatus,
    Reconciliation,
    StatementStatus,
    TransactionKind,
    TransactionStatus,
)

from tests.factories import ACCOUNT_ID, UNIT_ID, make_statement, make_transaction


def match(statement_id="s1", transaction_id="rev-1", status=MatchStatus.PENDING, created=None):
    kwargs = {}
    if created is not None:
        kwargs["created_at"] = created
    return Reconciliation(
        statement_line_id=statement_id,
        transaction_id=transaction_id,
        transaction_type=TransactionKind.RECEIVABLE,
        status=status,
        **kwargs,
    )


class TestInMemoryTransactionRepository:

    @pytest.mark.asyncio
    async def test_lists_are_scoped_and_capped(self, transaction_repo):
        transaction_repo.add_statement_lines([
            make_statement(id="s2"),
            make_statement(id="s1"),
            make_statement(id="other", account_id="acc-other"),
        ])
        transaction_repo.add_transactions([
            make_transaction(id="rev-1"),
            make_transaction(id="rev-done", status=TransactionStatus.RECONCILED),
            make_transaction(id="rev-foreign", unit_id="unit-2"),
        ])

        lines = await transaction_repo.list_statement_lines(ACCOUNT_ID, 1)
        transactions = await transaction_repo.list_eligible_transactions(UNIT_ID, 10)

        assert [line.id for line in lines] == ["s1"]
        assert [t.id for t in transactions] == ["rev-1"]

    @pytest.mark.asyncio
    async def test_reads_return_copies(self, transaction_repo):
        transaction_repo.add_statement_lines([make_statement(id="s1")])

        line = await transaction_repo.get_statement_line("s1")
        line.reconciliation_status = StatementStatus.RECONCILED

        stored = await transaction_repo.get_statement_line("s1")
        assert stored.reconciliation_status == StatementStatus.PENDING

    @pytest.mark.asyncio
    async def test_same_id_different_kind(self, transaction_repo):
        transaction_repo.add_transactions([
            make_transaction(id="42", kind=TransactionKind.RECEIVABLE),
            make_transaction(id="42", kind=TransactionKind.PAYABLE),
        ])

        await transaction_repo.update_transaction_status(
            TransactionKind.PAYABLE, "42", TransactionStatus.RECONCILED
        )

        receivable = await transaction_repo.get_transaction(TransactionKind.RECEIVABLE, "42")
        assert receivable.reconciliation_status == TransactionStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_ids(self, transaction_repo):
        with pytest.raises(NotFoundError):
            await transaction_repo.get_account_unit("acc-missing")
        with pytest.raises(NotFoundError):
            await transaction_repo.update_statement_status("missing", StatementStatus.RECONCILED)
        with pytest.raises(NotFoundError):
            await transaction_repo.get_transaction(TransactionKind.PAYABLE, "missing")


class TestInMemoryReconciliationRepository:

    @pytest.mark.asyncio
    async def test_confirmed_unique_per_statement(self, reconciliation_repo):
        first = await reconciliation_repo.create_match(match(transaction_id="rev-1"))
        second = await reconciliation_repo.create_match(match(transaction_id="rev-2"))

        await reconciliation_repo.update_match_status(first.id, MatchStatus.CONFIRMED)

        with pytest.raises(AlreadyConfirmedError):
            await reconciliation_repo.update_match_status(second.id, MatchStatus.CONFIRMED)
        assert reconciliation_repo.confirmed_count == 1

    @pytest.mark.asyncio
    async def test_confirmed_unique_per_transaction_on_create(self, reconciliation_repo):
        await reconciliation_repo.create_match(match("s1", "rev-1", MatchStatus.CONFIRMED))

        with pytest.raises(AlreadyConfirmedError):
            await reconciliation_repo.create_match(match("s2", "rev-1", MatchStatus.CONFIRMED))

    @pytest.mark.asyncio
    async def test_terminal_statuses_are_final(self, reconciliation_repo):
        rejected = await reconciliation_repo.create_match(match(status=MatchStatus.REJECTED))

        with pytest.raises(InvalidTransitionError):
            await reconciliation_repo.update_match_status(rejected.id, MatchStatus.CONFIRMED)

    @pytest.mark.asyncio
    async def test_delete_releases_index(self, reconciliation_repo):
        confirmed = await reconciliation_repo.create_match(match(status=MatchStatus.CONFIRMED))

        await reconciliation_repo.delete_match(confirmed.id)

        assert reconciliation_repo.confirmed_count == 0
        with pytest.raises(NotFoundError):
            await reconciliation_repo.get_match(confirmed.id)

    @pytest.mark.asyncio
    async def test_list_matches_by_date_newest_first(self, reconciliation_repo):
        older = await reconciliation_repo.create_match(
            match("s1", created=datetime(2025, 1, 10, tzinfo=timezone.utc))
        )
        newer = await reconciliation_repo.create_match(
            match("s2", "rev-2", created=datetime(2025, 2, 1, tzinfo=timezone.utc))
        )

        everything = await reconciliation_repo.list_matches()
        january = await reconciliation_repo.list_matches(
            start_date=date(2025, 1, 1), end_date=date(2025, 1, 31)
        )
        scoped = await reconciliation_repo.list_matches(statement_line_ids=["s2"])

        assert [m.id for m in everything] == [newer.id, older.id]
        assert [m.id for m in january] == [older.id]
        assert [m.id for m in scoped] == [newer.id]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
