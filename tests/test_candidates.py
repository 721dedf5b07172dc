"""
Tests for the Candidate Generator.
"""

import pytest
from datetime import date

from bankrec.models import StatementStatus, TransactionKind, TransactionStatus
from bankrec.reconciliation.candidates import CandidateGenerator
from bankrec.reconciliation.tolerance import ToleranceConfig

from tests.factories import make_statement, make_transaction


@pytest.fixture
def generator():
    return CandidateGenerator()


@pytest.fixture
def tolerance():
    return ToleranceConfig.from_currency(1.00, 2)


class TestCandidateGenerator:
    """Test suite for candidate generation."""

    def test_credit_only_matches_receivable(self, generator, tolerance):
        lines = [make_statement(id="s1", amount=150.00)]
        transactions = [
            make_transaction(id="rev-1", amount=150.00, kind=TransactionKind.RECEIVABLE),
            make_transaction(id="exp-1", amount=150.00, kind=TransactionKind.PAYABLE),
        ]

        result = generator.generate(lines, transactions, tolerance)

        assert [c.transaction_id for c in result.by_statement["s1"]] == ["rev-1"]
        assert result.by_statement["s1"][0].transaction_type == TransactionKind.RECEIVABLE

    def test_debit_only_matches_payable(self, generator, tolerance):
        lines = [make_statement(id="s1", amount=-89.90)]
        transactions = [
            make_transaction(id="rev-1", amount=89.90, kind=TransactionKind.RECEIVABLE),
            make_transaction(id="exp-1", amount=89.90, kind=TransactionKind.PAYABLE),
        ]

        result = generator.generate(lines, transactions, tolerance)

        assert [c.transaction_id for c in result.by_statement["s1"]] == ["exp-1"]

    def test_reconciled_statement_excluded_and_counted(self, generator, tolerance):
        lines = [
            make_statement(id="s1", status=StatementStatus.RECONCILED),
            make_statement(id="s2"),
        ]
        transactions = [make_transaction(id="rev-1")]

        result = generator.generate(lines, transactions, tolerance)

        assert "s1" not in result.by_statement
        assert result.already_reconciled == 1
        assert len(result.by_statement["s2"]) == 1

    def test_transaction_status_filter(self, generator, tolerance):
        lines = [make_statement(id="s1")]
        transactions = [
            make_transaction(id="rev-pending", status=TransactionStatus.PENDING),
            make_transaction(id="rev-scheduled", status=TransactionStatus.SCHEDULED),
            make_transaction(id="rev-done", status=TransactionStatus.RECONCILED),
        ]

        result = generator.generate(lines, transactions, tolerance)

        ids = sorted(c.transaction_id for c in result.by_statement["s1"])
        assert ids == ["rev-pending", "rev-scheduled"]

    def test_incompatible_pairs_are_skipped(self, generator, tolerance):
        lines = [make_statement(id="s1", amount=150.00, on=date(2025, 1, 15))]
        transactions = [
            make_transaction(id="far-amount", amount=152.00),
            make_transaction(id="far-date", amount=150.00, expected=date(2025, 1, 25)),
        ]

        result = generator.generate(lines, transactions, tolerance)

        assert result.by_statement["s1"] == []
        assert result.pairs_evaluated == 2

    def test_nominal_date_fallback(self, generator, tolerance):
        lines = [make_statement(id="s1", on=date(2025, 1, 15))]
        transactions = [
            make_transaction(id="rev-1", expected=None, nominal=date(2025, 1, 16)),
            make_transaction(id="rev-undated", expected=None, nominal=None),
        ]

        result = generator.generate(lines, transactions, tolerance)

        candidates = result.by_statement["s1"]
        assert [c.transaction_id for c in candidates] == ["rev-1"]
        assert candidates[0].date_difference_days == 1

    def test_expected_date_preferred_over_nominal(self, generator, tolerance):
        lines = [make_statement(id="s1", on=date(2025, 1, 15))]
        transactions = [
            make_transaction(id="rev-1", expected=date(2025, 1, 15), nominal=date(2025, 1, 1)),
        ]

        result = generator.generate(lines, transactions, tolerance)

        assert result.by_statement["s1"][0].date_difference_days == 0

    def test_working_set_is_capped(self, generator, tolerance):
        lines = [
            make_statement(id=f"s{i:03d}", on=date(2025, 1, 1 + i % 28))
            for i in range(150)
        ]
        transactions = [make_transaction(id=f"rev-{i:03d}") for i in range(150)]

        result = generator.generate(lines, transactions, tolerance, limit=100)

        assert result.statements_scanned == 100
        assert result.transactions_scanned == 100
        assert len(result.by_statement) == 100

    def test_statement_order_is_date_then_id(self, generator, tolerance):
        lines = [
            make_statement(id="b", on=date(2025, 1, 15)),
            make_statement(id="c", on=date(2025, 1, 14)),
            make_statement(id="a", on=date(2025, 1, 15)),
        ]
        transactions = [make_transaction(id="rev-1", expected=date(2025, 1, 15))]

        result = generator.generate(lines, transactions, tolerance)

        assert list(result.by_statement) == ["c", "a", "b"]

    def test_match_reason_and_counterparty(self, generator, tolerance):
        lines = [make_statement(id="s1", description="PIX RECEBIDO JOAO SILVA")]
        transactions = [
            make_transaction(id="rev-1", counterparty="Joao Silva", description="Corte + barba"),
            make_transaction(id="rev-2", counterparty="Maria Souza", amount=150.50),
        ]

        result = generator.generate(lines, transactions, tolerance)

        by_id = {c.transaction_id: c for c in result.by_statement["s1"]}
        assert "exact_amount" in by_id["rev-1"].match_reason
        assert "same_date" in by_id["rev-1"].match_reason
        assert "counterparty_in_description" in by_id["rev-1"].match_reason
        assert "amount_within_tolerance" in by_id["rev-2"].match_reason
        # Descriptive only: scores depend on amount/date alone
        assert by_id["rev-1"].confidence_score == 100

    def test_empty_inputs(self, generator, tolerance):
        result = generator.generate([], [], tolerance)

        assert result.by_statement == {}
        assert result.total_candidates == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
