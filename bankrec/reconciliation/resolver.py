"""
Assignment Resolver.

Turns per-statement candidate lists into a 1:1 assignment: each statement
line gets at most one transaction and no transaction is used twice.
"""

from typing import Dict, List, Mapping, Sequence, Set

import structlog

from ..models import MatchCandidate

logger = structlog.get_logger()


def candidate_rank(candidate: MatchCandidate):
    """
    Sort key where the smallest value is the best candidate:
    highest score, then smallest amount diff, then smallest date diff,
    then smallest transaction id.
    """
    return (
        -candidate.confidence_score,
        candidate.amount_difference_cents,
        candidate.date_difference_days,
        candidate.transaction_id,
    )


class AssignmentResolver:
    """Greedy, order-dependent resolver with a per-run consumed set."""

    def resolve(
        self,
        candidates_by_statement: Mapping[str, Sequence[MatchCandidate]],
    ) -> List[MatchCandidate]:
        """
        Pick the best unconsumed transaction for each statement line.

        Statement lines are processed in mapping order; callers are expected
        to supply them already sorted.

        Returns:
            Final matches sorted by score descending, ties by statement line id
        """
        consumed_statements: Set[str] = set()
        consumed_transactions: Set[str] = set()
        final: List[MatchCandidate] = []

        for statement_id, candidates in candidates_by_statement.items():
            if statement_id in consumed_statements:
                continue

            available = [
                c for c in candidates
                if c.transaction_id not in consumed_transactions
            ]
            if not available:
                continue

            winner = min(available, key=candidate_rank)
            final.append(winner)
            consumed_statements.add(statement_id)
            consumed_transactions.add(winner.transaction_id)

        final.sort(key=lambda m: (-m.confidence_score, m.statement_line_id))

        logger.info(
            "Assignment resolved",
            statements=len(candidates_by_statement),
            matches=len(final),
        )
        return final


def resolve(
    candidates_by_statement: Mapping[str, Sequence[MatchCandidate]],
) -> List[MatchCandidate]:
    """Module-level shortcut for `AssignmentResolver().resolve`."""
    return AssignmentResolver().resolve(candidates_by_statement)


def group_by_statement(candidates: Sequence[MatchCandidate]) -> Dict[str, List[MatchCandidate]]:
    """Group a flat candidate list by statement line, keeping first-seen order."""
    grouped: Dict[str, List[MatchCandidate]] = {}
    for candidate in candidates:
        grouped.setdefault(candidate.statement_line_id, []).append(candidate)
    return grouped
