"""Reconciliation engine components."""

from .tolerance import ToleranceConfig, Verdict, evaluate
from .candidates import CandidateGenerator, CandidateSet, generate_candidates
from .resolver import AssignmentResolver, resolve
from .ledger import ReconciliationLedger
from .orchestrator import ReconciliationOrchestrator

__all__ = [
    "ToleranceConfig",
    "Verdict",
    "evaluate",
    "CandidateGenerator",
    "CandidateSet",
    "generate_candidates",
    "AssignmentResolver",
    "resolve",
    "ReconciliationLedger",
    "ReconciliationOrchestrator",
]
