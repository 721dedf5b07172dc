"""
Reconciliation Ledger.

Owns the match state machine and the side effects of confirming a match on
the linked statement line and transaction.

    pending   -> confirmed | rejected | divergent
    divergent -> confirmed | rejected
    confirmed, rejected: terminal
"""

from typing import Optional

import structlog

from ..config import get_settings
from ..errors import (
    AlreadyConfirmedError,
    InvalidTransitionError,
    PartialConfirmError,
    ValidationError,
)
from ..models import (
    AuditAction,
    AuditEntry,
    MatchCandidate,
    MatchStatus,
    Reconciliation,
    StatementStatus,
    TransactionKind,
    TransactionStatus,
)
from ..models.reconciliation import utcnow
from ..repositories import ReconciliationRepository, TransactionRepository
from ..utils.audit_logger import AuditLogger
from .tolerance import to_cents

logger = structlog.get_logger()

ALLOWED_TRANSITIONS = {
    MatchStatus.PENDING: {MatchStatus.CONFIRMED, MatchStatus.REJECTED, MatchStatus.DIVERGENT},
    MatchStatus.DIVERGENT: {MatchStatus.CONFIRMED, MatchStatus.REJECTED},
    MatchStatus.CONFIRMED: set(),
    MatchStatus.REJECTED: set(),
}


def check_transition(match: Reconciliation, target: MatchStatus) -> None:
    """Raise if `match` may not move to `target`."""
    if match.status == MatchStatus.CONFIRMED:
        raise AlreadyConfirmedError(
            f"Reconciliation {match.id} was already confirmed",
            match_id=match.id,
        )
    if target not in ALLOWED_TRANSITIONS[match.status]:
        raise InvalidTransitionError(match.id, match.status.value, target.value)


class ReconciliationLedger:
    """Confirm/reject workflow over the reconciliation repository."""

    def __init__(
        self,
        transactions: TransactionRepository,
        reconciliations: ReconciliationRepository,
        audit: Optional[AuditLogger] = None,
    ):
        self.settings = get_settings()
        self.transactions = transactions
        self.reconciliations = reconciliations
        self.audit = audit or AuditLogger()

    async def open_match_for(self, candidate: MatchCandidate) -> Optional[Reconciliation]:
        """Pending or divergent match already stored for the same pair, if any."""
        matches = await self.reconciliations.list_matches(
            statement_line_ids=[candidate.statement_line_id],
            transaction_type=candidate.transaction_type,
        )
        for match in matches:
            if match.transaction_id == candidate.transaction_id and match.status.is_open:
                return match
        return None

    async def propose(self, candidate: MatchCandidate) -> Reconciliation:
        """
        Persist a resolved candidate as a pending (or divergent) match.
        An open match for the same pair is returned instead of a new row.
        """
        existing = await self.open_match_for(candidate)
        if existing is not None:
            logger.debug("Reusing open proposal", match_id=existing.id)
            return existing

        match = await self.reconciliations.create_match(Reconciliation.from_candidate(candidate))
        self.audit.log(AuditEntry(
            action=AuditAction.MATCH_PROPOSED,
            match_id=match.id,
            statement_line_id=match.statement_line_id,
            transaction_id=match.transaction_id,
            message=f"Match proposed: {match.status.value}",
            details={
                "confidence_score": match.confidence_score,
                "amount_difference": match.amount_difference,
                "date_difference_days": match.date_difference_days,
            },
        ))
        return match

    async def confirm(self, match_id: str) -> Reconciliation:
        """
        Confirm a match and mark both linked records reconciled.

        Raises:
            NotFoundError: unknown match id
            AlreadyConfirmedError: already confirmed, or a concurrent confirm won
            InvalidTransitionError: match was rejected
            PartialConfirmError: match confirmed but linked records not updated
        """
        match = await self.reconciliations.get_match(match_id)
        check_transition(match, MatchStatus.CONFIRMED)

        confirmed = await self.reconciliations.update_match_status(
            match_id,
            MatchStatus.CONFIRMED,
            confirmed_at=utcnow(),
        )

        try:
            await self.transactions.update_statement_status(
                confirmed.statement_line_id,
                StatementStatus.RECONCILED,
            )
            await self.transactions.update_transaction_status(
                confirmed.transaction_type,
                confirmed.transaction_id,
                TransactionStatus.RECONCILED,
            )
        except Exception as e:
            self.audit.log(AuditEntry(
                action=AuditAction.CONFIRM_INCOMPLETE,
                match_id=match_id,
                statement_line_id=confirmed.statement_line_id,
                transaction_id=confirmed.transaction_id,
                message="Match confirmed but linked records were not updated",
                success=False,
                error_message=str(e),
            ))
            raise PartialConfirmError(match_id, e) from e

        self.audit.log(AuditEntry(
            action=AuditAction.MATCH_CONFIRMED,
            match_id=match_id,
            statement_line_id=confirmed.statement_line_id,
            transaction_id=confirmed.transaction_id,
            message="Match confirmed",
            details={"matched_by": confirmed.matched_by},
        ))
        return confirmed

    async def reject(self, match_id: str, reason: str = "") -> Reconciliation:
        """
        Discard a proposed match. Statement line and transaction stay
        available for future matching.
        """
        match = await self.reconciliations.get_match(match_id)
        check_transition(match, MatchStatus.REJECTED)

        notes = match.notes
        if reason.strip():
            notes = f"{notes}\nRejected: {reason.strip()}" if notes else f"Rejected: {reason.strip()}"

        rejected = await self.reconciliations.update_match_status(
            match_id,
            MatchStatus.REJECTED,
            notes=notes,
        )

        self.audit.log(AuditEntry(
            action=AuditAction.MATCH_REJECTED,
            match_id=match_id,
            statement_line_id=rejected.statement_line_id,
            transaction_id=rejected.transaction_id,
            message="Match rejected",
            details={"reason": reason.strip()},
        ))
        return rejected

    async def manual_link(
        self,
        statement_line_id: str,
        transaction_type: TransactionKind,
        transaction_id: str,
        adjustment_amount=0,
        notes: Optional[str] = None,
    ) -> Reconciliation:
        """
        Link a statement line to a transaction chosen by a person, skipping
        review. The stored difference is signed:
        |statement| - |transaction| - adjustment.
        """
        if not statement_line_id or not transaction_id:
            raise ValidationError(
                "statement_line_id",
                "Statement line id and transaction id are required for a manual link",
            )
        if not isinstance(transaction_type, TransactionKind):
            try:
                transaction_type = TransactionKind(transaction_type)
            except ValueError:
                raise ValidationError(
                    "transaction_type",
                    "Transaction type must be Receivable or Payable",
                ) from None

        adjustment_cents = to_cents(adjustment_amount or 0)

        line = await self.transactions.get_statement_line(statement_line_id)
        txn = await self.transactions.get_transaction(transaction_type, transaction_id)

        if line.is_reconciled:
            raise AlreadyConfirmedError(
                f"Statement line {statement_line_id} is already reconciled",
                statement_line_id=statement_line_id,
            )
        if not txn.is_eligible:
            raise AlreadyConfirmedError(
                f"{transaction_type.value} {transaction_id} is already reconciled",
                transaction_id=transaction_id,
            )

        difference = abs(line.amount_cents) - abs(txn.expected_amount_cents) - adjustment_cents
        date_diff = 0
        if line.transaction_date and txn.reference_date:
            date_diff = abs((line.transaction_date - txn.reference_date).days)

        divergent = abs(difference) > self.settings.divergence_threshold_cents
        match = await self.reconciliations.create_match(Reconciliation(
            statement_line_id=statement_line_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount_difference_cents=difference,
            date_difference_days=date_diff,
            confidence_score=100,
            status=MatchStatus.DIVERGENT if divergent else MatchStatus.PENDING,
            matched_by="manual",
            notes=(notes or "").strip() or "Manual link",
        ))

        self.audit.log(AuditEntry(
            action=AuditAction.MANUAL_LINK,
            match_id=match.id,
            statement_line_id=statement_line_id,
            transaction_id=transaction_id,
            message="Manual link created",
            details={
                "amount_difference": match.amount_difference,
                "adjustment_amount": adjustment_cents / 100.0,
                "divergent": divergent,
            },
        ))

        try:
            return await self.confirm(match.id)
        except AlreadyConfirmedError:
            # Another confirm won one of the sides
            await self.reconciliations.delete_match(match.id)
            raise

    async def update_notes(self, match_id: str, notes: str) -> Reconciliation:
        """Replace the notes of a match; the only edit allowed after confirmation."""
        match = await self.reconciliations.get_match(match_id)
        if match.status == MatchStatus.REJECTED:
            raise InvalidTransitionError(match_id, match.status.value, match.status.value)

        updated = await self.reconciliations.update_match_notes(match_id, notes.strip())
        self.audit.log(AuditEntry(
            action=AuditAction.NOTES_UPDATED,
            match_id=match_id,
            statement_line_id=updated.statement_line_id,
            transaction_id=updated.transaction_id,
            message="Match notes updated",
        ))
        return updated
