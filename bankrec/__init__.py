"""Bank reconciliation auto-matching between statement lines and receivables/payables."""

__version__ = "1.0.0"
