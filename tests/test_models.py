"""
Tests for data models, enums and error types.
"""

import pytest

from bankrec.config import Settings
from bankrec.errors import ErrorCode, NotFoundError, ValidationError
from bankrec.models import (
    ConfidenceLevel,
    FlowDirection,
    MatchCandidate,
    MatchStatus,
    OperationResult,
    Reconciliation,
    ReconciliationStats,
    TransactionKind,
)

from tests.factories import make_statement, make_transaction


class TestModels:

    @pytest.mark.parametrize("score,level", [
        (100, ConfidenceLevel.EXACT),
        (95, ConfidenceLevel.EXACT),
        (93, ConfidenceLevel.HIGH),
        (80, ConfidenceLevel.MEDIUM),
        (55, ConfidenceLevel.LOW),
    ])
    def test_confidence_level(self, score, level):
        assert ConfidenceLevel.from_score(score) == level

    def test_match_status_groups(self):
        assert MatchStatus.DIVERGENT.is_open
        assert MatchStatus.REJECTED.is_terminal
        assert not MatchStatus.PENDING.is_terminal

    def test_flow_direction(self):
        assert make_statement(amount=-10.00).flow_direction == FlowDirection.OUTFLOW
        assert make_transaction(kind=TransactionKind.PAYABLE).flow_direction == FlowDirection.OUTFLOW
        assert make_transaction().flow_direction == FlowDirection.INFLOW

    def test_candidate_to_proposal(self):
        candidate = MatchCandidate(
            statement_line_id="s1",
            transaction_id="rev-1",
            transaction_type=TransactionKind.RECEIVABLE,
            amount_difference_cents=25,
            date_difference_days=1,
            confidence_score=81,
            match_reason="amount_within_tolerance, date_within_1_days",
        )

        proposal = Reconciliation.from_candidate(candidate)

        assert proposal.status == MatchStatus.DIVERGENT
        assert proposal.notes == candidate.match_reason
        assert proposal.to_dict()["confidence_level"] == "medium"
        assert not candidate.is_exact

    def test_stats_percentage(self):
        assert ReconciliationStats().reconciliation_percentage == 0
        stats = ReconciliationStats(total_statements=3, total_reconciled=1, divergent_amount_cents=150)
        assert stats.to_dict()["reconciliation_percentage"] == 33
        assert stats.to_dict()["divergent_amount"] == 1.50

    def test_operation_result(self):
        failed = OperationResult.fail("nope", ErrorCode.NOT_FOUND.value)
        assert failed.to_dict() == {
            "success": False,
            "data": None,
            "error": "nope",
            "error_code": "NOT_FOUND",
        }


class TestErrors:

    def test_validation_error(self):
        error = ValidationError("tolerance", "Tolerance must be greater than zero")

        assert error.code == ErrorCode.INVALID_INPUT
        assert error.to_dict() == {
            "error": "INVALID_INPUT",
            "message": "Tolerance must be greater than zero",
            "context": {"field": "tolerance"},
        }

    def test_not_found_message(self):
        assert str(NotFoundError("Reconciliation", "m-1")) == "Reconciliation not found: m-1"


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.max_amount_tolerance_cents == 10000
        assert settings.divergence_threshold_cents == 1
        assert settings.scan_limit == 100

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SCAN_LIMIT", "25")
        monkeypatch.setenv("APP_ENV", "production")

        settings = Settings()

        assert settings.scan_limit == 25
        assert settings.is_production


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
