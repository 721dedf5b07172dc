"""Utility modules."""

from .text_similarity import TextSimilarityEngine
from .audit_logger import AuditLogger
from .log_config import setup_logging

__all__ = ["TextSimilarityEngine", "AuditLogger", "setup_logging"]
