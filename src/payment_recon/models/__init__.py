"""Data models for reconciliation."""

from .transaction import (
    BankTransaction,
    PaymentRecord,
    MatchConfidence,
    ReconciliationMatch,
    TierCounts,
    ReconciliationSummary,
    RowParseError,
    StatementParseResult,
)

__all__ = [
    "BankTransaction",
    "PaymentRecord",
    "MatchConfidence",
    "ReconciliationMatch",
    "TierCounts",
    "ReconciliationSummary",
    "RowParseError",
    "StatementParseResult",
]
