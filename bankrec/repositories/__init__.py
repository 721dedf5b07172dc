"""Repository interfaces and in-memory implementations."""

from .base import ReconciliationRepository, TransactionRepository
from .memory import InMemoryReconciliationRepository, InMemoryTransactionRepository

__all__ = [
    "ReconciliationRepository",
    "TransactionRepository",
    "InMemoryReconciliationRepository",
    "InMemoryTransactionRepository",
]
