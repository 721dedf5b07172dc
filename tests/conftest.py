"""
Shared test fixtures.
"""

import pytest

from bankrec.reconciliation import ReconciliationOrchestrator
from bankrec.repositories import (
    InMemoryReconciliationRepository,
    InMemoryTransactionRepository,
)
from bankrec.utils import AuditLogger

from tests.factories import ACCOUNT_ID, UNIT_ID


@pytest.fixture
def transaction_repo():
    repo = InMemoryTransactionRepository()
    repo.add_account(ACCOUNT_ID, UNIT_ID)
    return repo


@pytest.fixture
def reconciliation_repo():
    return InMemoryReconciliationRepository()


@pytest.fixture
def audit():
    return AuditLogger("test")


@pytest.fixture
def orchestrator(transaction_repo, reconciliation_repo, audit):
    return ReconciliationOrchestrator(transaction_repo, reconciliation_repo, audit)
