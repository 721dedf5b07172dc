"""
Candidate Generator.

For each pending statement line, scans every eligible transaction of the
compatible flow direction (credit <-> receivable, debit <-> payable) and keeps
every pairing that passes the tolerance evaluator.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import structlog

from ..config import get_settings
from ..models import (
    MatchCandidate,
    StatementLine,
    Transaction,
)
from ..utils.text_similarity import TextSimilarityEngine
from .tolerance import ToleranceConfig, evaluate

logger = structlog.get_logger()


@dataclass
class CandidateSet:
    """Candidates grouped per statement line, in processing order."""
    by_statement: Dict[str, List[MatchCandidate]] = field(default_factory=dict)

    # Scan counters
    statements_scanned: int = 0
    transactions_scanned: int = 0
    already_reconciled: int = 0
    pairs_evaluated: int = 0

    @property
    def total_candidates(self) -> int:
        return sum(len(c) for c in self.by_statement.values())


def statement_sort_key(line: StatementLine):
    """Stable processing order: (transaction_date, id). Undated lines go last."""
    return (line.transaction_date is None, line.transaction_date, line.id)


def transaction_sort_key(txn: Transaction):
    return (txn.reference_date is None, txn.reference_date, txn.id)


class CandidateGenerator:
    """Builds scored candidate pairings between statement lines and transactions."""

    def __init__(self, similarity_engine: Optional[TextSimilarityEngine] = None):
        self.settings = get_settings()
        self.similarity_engine = similarity_engine or TextSimilarityEngine()

    def generate(
        self,
        statement_lines: Sequence[StatementLine],
        transactions: Sequence[Transaction],
        tolerance: ToleranceConfig,
        limit: Optional[int] = None,
    ) -> CandidateSet:
        """
        Generate every compatible candidate.

        Args:
            statement_lines: Statement lines of any status
            transactions: Receivables and payables of any status
            tolerance: Validated tolerances
            limit: Working set cap applied to each collection

        Returns:
            CandidateSet keyed by statement line id
        """
        if limit is None:
            limit = self.settings.scan_limit

        lines = sorted(statement_lines, key=statement_sort_key)[:limit]
        scanned_transactions = sorted(transactions, key=transaction_sort_key)[:limit]

        result = CandidateSet(
            statements_scanned=len(lines),
            transactions_scanned=len(scanned_transactions),
        )

        eligible_transactions = [
            txn for txn in scanned_transactions
            if txn.is_eligible and txn.reference_date is not None
        ]
        skipped_undated = sum(
            1 for txn in scanned_transactions
            if txn.is_eligible and txn.reference_date is None
        )
        if skipped_undated:
            logger.debug("Skipping transactions without a reference date", count=skipped_undated)

        for line in lines:
            if line.is_reconciled:
                result.already_reconciled += 1
                continue
            if line.transaction_date is None or line.amount_cents == 0:
                logger.debug("Skipping unusable statement line", statement_line_id=line.id)
                continue

            candidates = []
            for txn in eligible_transactions:
                if txn.flow_direction != line.flow_direction:
                    continue

                result.pairs_evaluated += 1
                verdict = evaluate(
                    line.amount_cents,
                    line.transaction_date,
                    txn.expected_amount_cents,
                    txn.reference_date,
                    tolerance,
                )
                if not verdict.compatible:
                    continue

                text_sim = self.similarity_engine.compare(
                    line.description,
                    txn.description,
                    txn.counterparty_name,
                )
                candidates.append(MatchCandidate(
                    statement_line_id=line.id,
                    transaction_id=txn.id,
                    transaction_type=txn.kind,
                    amount_difference_cents=verdict.amount_difference_cents,
                    date_difference_days=verdict.date_difference_days,
                    confidence_score=verdict.confidence_score,
                    text_similarity=text_sim,
                    match_reason=self._build_match_reason(
                        verdict.amount_difference_cents,
                        verdict.date_difference_days,
                        line,
                        txn,
                        text_sim,
                    ),
                ))

            result.by_statement[line.id] = candidates

        logger.info(
            "Candidate generation complete",
            statements=result.statements_scanned,
            transactions=result.transactions_scanned,
            already_reconciled=result.already_reconciled,
            pairs_evaluated=result.pairs_evaluated,
            candidates=result.total_candidates,
        )
        return result

    def _build_match_reason(
        self,
        amount_diff_cents: int,
        date_diff_days: int,
        line: StatementLine,
        txn: Transaction,
        text_similarity: float,
    ) -> str:
        """Build human-readable match reason."""
        reasons = []
        if amount_diff_cents == 0:
            reasons.append("exact_amount")
        else:
            reasons.append("amount_within_tolerance")
        if date_diff_days == 0:
            reasons.append("same_date")
        else:
            reasons.append(f"date_within_{date_diff_days}_days")
        if txn.counterparty_name and self.similarity_engine.mentions(
            line.description, txn.counterparty_name
        ):
            reasons.append("counterparty_in_description")
        elif text_similarity >= self.settings.text_similarity_threshold:
            reasons.append("similar_description")
        return ", ".join(reasons)


def generate_candidates(
    statement_lines: Sequence[StatementLine],
    transactions: Sequence[Transaction],
    tolerance: ToleranceConfig,
    limit: Optional[int] = None,
) -> CandidateSet:
    """Module-level shortcut for `CandidateGenerator().generate`."""
    return CandidateGenerator().generate(statement_lines, transactions, tolerance, limit)
