"""
Reconciliation error types.

Each error carries a stable code for callers plus optional debugging context.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standardized error codes for client handling."""
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_CONFIRMED = "ALREADY_CONFIRMED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    DATA_ACCESS = "DATA_ACCESS"
    PARTIAL_CONFIRM = "PARTIAL_CONFIRM"


class ReconciliationError(Exception):
    """Base exception with structured error info."""

    code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.detail = detail
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to response format."""
        result = {
            "error": self.code.value,
            "message": self.message,
        }
        if self.detail:
            result["detail"] = self.detail
        if self.context:
            result["context"] = self.context
        return result


class ValidationError(ReconciliationError):
    """Bad input; raised before any work is attempted."""

    code = ErrorCode.INVALID_INPUT

    def __init__(self, field: str, message: str):
        super().__init__(message, context={"field": field})
        self.field = field


class NotFoundError(ReconciliationError):
    """Referenced match, statement line or transaction does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} not found: {entity_id}",
            context={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class AlreadyConfirmedError(ReconciliationError):
    """Match (or one of its sides) is already confirmed."""

    code = ErrorCode.ALREADY_CONFIRMED

    def __init__(self, message: str, **context: Any):
        super().__init__(message, context=context)


class InvalidTransitionError(ReconciliationError):
    """Status transition not allowed by the match state machine."""

    code = ErrorCode.INVALID_TRANSITION

    def __init__(self, match_id: str, current: str, target: str):
        super().__init__(
            f"Cannot move match {match_id} from {current} to {target}",
            context={"match_id": match_id, "current": current, "target": target},
        )


class DataAccessError(ReconciliationError):
    """Repository layer failure (connectivity, constraint, etc.)."""

    code = ErrorCode.DATA_ACCESS

    def __init__(self, operation: str, message: str):
        super().__init__(message, detail=operation, context={"operation": operation})
        self.operation = operation


class PartialConfirmError(ReconciliationError):
    """
    Match status was written as confirmed but the statement line and/or
    transaction status update failed. Requires manual follow-up.
    """

    code = ErrorCode.PARTIAL_CONFIRM

    def __init__(self, match_id: str, cause: Exception):
        super().__init__(
            f"Match {match_id} confirmed but linked records were not updated: {cause}",
            detail=str(cause),
            context={"match_id": match_id},
        )
        self.match_id = match_id
        self.cause = cause
