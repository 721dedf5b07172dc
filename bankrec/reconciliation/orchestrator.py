"""
Reconciliation Orchestrator - public entry point.

Combines the pipeline for auto-reconciliation:
1. Input validation
2. Load statement lines and eligible transactions
3. Candidate generation (tolerance evaluation)
4. Assignment resolution (1:1)
5. Optional persistence of proposals (pending/divergent)

and exposes the manual confirm/reject/link workflow. Every operation returns
an OperationResult envelope instead of raising.
"""

from datetime import date
from typing import Awaitable, Callable, List, Optional, Union

import structlog

from ..config import get_settings
from ..errors import DataAccessError, ReconciliationError, ValidationError
from ..models import (
    AuditAction,
    AuditEntry,
    AutoReconcileResult,
    MatchCandidate,
    MatchStatus,
    OperationResult,
    Reconciliation,
    ReconciliationStats,
    ReconciliationSummary,
    TransactionKind,
)
from ..repositories import ReconciliationRepository, TransactionRepository
from ..utils.audit_logger import AuditLogger
from .candidates import CandidateGenerator
from .ledger import ReconciliationLedger
from .resolver import AssignmentResolver
from .tolerance import ToleranceConfig

logger = structlog.get_logger()


class ReconciliationOrchestrator:
    """
    Main orchestrator for the reconciliation workflow.

    Only plain data crosses this boundary; results are wrapped in
    OperationResult.
    """

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
        self.generator = CandidateGenerator()
        self.resolver = AssignmentResolver()
        self.ledger = ReconciliationLedger(transactions, reconciliations, self.audit)

    async def _run(self, operation: str, call: Callable[[], Awaitable]) -> OperationResult:
        """
        Execute `call`, converting every failure to a failed envelope.

        Errors outside the reconciliation taxonomy come from the storage
        layer and are reported as DataAccessError with the original message.
        """
        try:
            return OperationResult.ok(await call())
        except ReconciliationError as e:
            logger.warning(
                "Reconciliation operation failed",
                operation=operation,
                error=e.message,
                code=e.code.value,
                context=e.context,
            )
            return OperationResult.fail(e.message, e.code.value)
        except Exception as e:
            logger.exception("Reconciliation operation failed", operation=operation, error=str(e))
            error = DataAccessError(operation, str(e) or type(e).__name__)
            return OperationResult.fail(error.message, error.code.value)

    def validate_run_parameters(
        self,
        account_id: Optional[str],
        tolerance,
        date_tolerance_days,
        limit,
    ) -> ToleranceConfig:
        """Fail fast on bad input before any data is loaded."""
        if not account_id or not str(account_id).strip():
            raise ValidationError("account_id", "Account ID is required")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("limit", "Limit must be a positive integer")
        return ToleranceConfig.from_currency(
            tolerance,
            date_tolerance_days,
            self.settings.max_amount_tolerance,
        )

    async def auto_reconcile(
        self,
        account_id: Optional[str],
        tolerance=None,
        date_tolerance_days: Optional[int] = None,
        limit: Optional[int] = None,
        persist: bool = True,
    ) -> OperationResult:
        """
        Propose matches between an account's statement lines and its unit's
        open receivables/payables.

        Args:
            account_id: Bank account to reconcile
            tolerance: Absolute amount tolerance in currency units, (0, 100]
            date_tolerance_days: Max day difference, >= 0
            limit: Working set cap for each collection
            persist: Save proposals as pending/divergent matches

        Returns:
            OperationResult with AutoReconcileResult data
        """
        if tolerance is None:
            tolerance = self.settings.default_amount_tolerance
        if date_tolerance_days is None:
            date_tolerance_days = self.settings.default_date_tolerance_days
        if limit is None:
            limit = self.settings.scan_limit

        async def call() -> AutoReconcileResult:
            try:
                config = self.validate_run_parameters(account_id, tolerance, date_tolerance_days, limit)
            except ValidationError as e:
                self.audit.log(AuditEntry(
                    action=AuditAction.VALIDATION_FAILED,
                    message="Auto reconcile rejected",
                    success=False,
                    error_message=e.message,
                    details={"account_id": account_id, "field": e.field},
                ))
                raise

            return await self._auto_reconcile(account_id, config, limit, persist)

        return await self._run("auto_reconcile", call)

    async def _auto_reconcile(
        self,
        account_id: str,
        config: ToleranceConfig,
        limit: int,
        persist: bool,
    ) -> AutoReconcileResult:
        self.audit.log(AuditEntry(
            action=AuditAction.RUN_STARTED,
            message="Auto reconcile started",
            details={
                "account_id": account_id,
                "amount_tolerance": config.amount_tolerance,
                "date_tolerance_days": config.date_tolerance_days,
                "limit": limit,
            },
        ))

        unit_id = await self.transactions.get_account_unit(account_id)
        statement_lines = await self.transactions.list_statement_lines(account_id, limit)
        transactions = await self.transactions.list_eligible_transactions(unit_id, limit)

        summary = ReconciliationSummary(
            total_statements=len(statement_lines),
            total_transactions=len(transactions),
            already_reconciled=sum(1 for line in statement_lines if line.is_reconciled),
        )

        if not statement_lines or not transactions:
            logger.info("Nothing to reconcile", account_id=account_id, **summary.to_dict())
            return AutoReconcileResult(matches=[], summary=summary)

        candidate_set = self.generator.generate(statement_lines, transactions, config, limit)
        final = self.resolver.resolve(candidate_set.by_statement)

        summary.total_statements = candidate_set.statements_scanned
        summary.total_transactions = candidate_set.transactions_scanned
        summary.already_reconciled = candidate_set.already_reconciled
        summary.matches_found = len(final)

        matches = list(final)
        if persist:
            matches = await self._persist_proposals(final)

        self.audit.log(AuditEntry(
            action=AuditAction.RUN_COMPLETED,
            message="Auto reconcile complete",
            details={"account_id": account_id, **summary.to_dict()},
        ))
        return AutoReconcileResult(matches=matches, summary=summary)

    async def _persist_proposals(self, final: List[MatchCandidate]) -> List[Reconciliation]:
        """
        Store every resolved match, reusing open proposals for the same pair.
        Rows created by this call are removed again if a later write fails.
        """
        proposals = []
        created = []
        try:
            for candidate in final:
                match = await self.ledger.open_match_for(candidate)
                if match is None:
                    match = await self.ledger.propose(candidate)
                    created.append(match.id)
                proposals.append(match)
        except Exception:
            for match_id in created:
                try:
                    await self.reconciliations.delete_match(match_id)
                except Exception as e:
                    logger.error("Could not remove proposal", match_id=match_id, error=str(e))
            raise
        return proposals

    async def confirm_reconciliation(self, match_id: str) -> OperationResult:
        """Confirm a proposed match."""
        async def call():
            if not match_id:
                raise ValidationError("match_id", "Reconciliation ID is required")
            return await self.ledger.confirm(match_id)

        return await self._run("confirm_reconciliation", call)

    async def reject_reconciliation(self, match_id: str, reason: str = "") -> OperationResult:
        """Reject a proposed match, leaving both sides available."""
        async def call():
            if not match_id:
                raise ValidationError("match_id", "Reconciliation ID is required")
            return await self.ledger.reject(match_id, reason or "")

        return await self._run("reject_reconciliation", call)

    async def manual_link(
        self,
        statement_line_id: str,
        transaction_type: Union[TransactionKind, str],
        transaction_id: str,
        adjustment_amount=0,
        notes: Optional[str] = None,
    ) -> OperationResult:
        """Link and confirm a statement line and transaction in one step."""
        return await self._run(
            "manual_link",
            lambda: self.ledger.manual_link(
                statement_line_id,
                transaction_type,
                transaction_id,
                adjustment_amount,
                notes,
            ),
        )

    async def update_notes(self, match_id: str, notes: str) -> OperationResult:
        return await self._run("update_notes", lambda: self.ledger.update_notes(match_id, notes or ""))

    async def get_reconciliation(self, match_id: str) -> OperationResult:
        """Fetch one match by id."""
        async def call():
            if not match_id:
                raise ValidationError("match_id", "Reconciliation ID is required")
            return await self.reconciliations.get_match(match_id)

        return await self._run("get_reconciliation", call)

    async def list_reconciliations(
        self,
        account_id: Optional[str] = None,
        status: Optional[Union[MatchStatus, str]] = None,
        transaction_type: Optional[Union[TransactionKind, str]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> OperationResult:
        """List matches, optionally restricted to one account and filters."""
        async def call():
            try:
                status_filter = MatchStatus(status) if status else None
            except ValueError:
                raise ValidationError("status", f"Unknown status: {status}") from None
            try:
                type_filter = TransactionKind(transaction_type) if transaction_type else None
            except ValueError:
                raise ValidationError(
                    "transaction_type",
                    "Transaction type must be Receivable or Payable",
                ) from None

            statement_ids = None
            if account_id:
                lines = await self.transactions.list_statement_lines(
                    account_id, self._unbounded_limit()
                )
                statement_ids = [line.id for line in lines]

            return await self.reconciliations.list_matches(
                statement_line_ids=statement_ids,
                status=status_filter,
                transaction_type=type_filter,
                start_date=start_date,
                end_date=end_date,
            )

        return await self._run("list_reconciliations", call)

    async def get_reconciliation_stats(self, account_id: str) -> OperationResult:
        """Aggregate reconciled/pending/divergent figures for an account."""
        async def call() -> ReconciliationStats:
            if not account_id:
                raise ValidationError("account_id", "Account ID is required")

            lines = await self.transactions.list_statement_lines(
                account_id, self._unbounded_limit()
            )
            confirmed = await self.reconciliations.list_matches(
                statement_line_ids=[line.id for line in lines],
                status=MatchStatus.CONFIRMED,
            )

            stats = ReconciliationStats(total_statements=len(lines))
            for line in lines:
                amount = abs(line.amount_cents)
                stats.total_amount_cents += amount
                if line.is_reconciled:
                    stats.total_reconciled += 1
                    stats.reconciled_amount_cents += amount
            stats.total_pending = stats.total_statements - stats.total_reconciled
            stats.pending_amount_cents = stats.total_amount_cents - stats.reconciled_amount_cents
            stats.divergent_amount_cents = sum(
                abs(m.amount_difference_cents) for m in confirmed
                if abs(m.amount_difference_cents) > self.settings.divergence_threshold_cents
            )
            return stats

        return await self._run("get_reconciliation_stats", call)

    def _unbounded_limit(self) -> int:
        # Reporting reads are not capped by scan_limit
        return 2 ** 31 - 1
