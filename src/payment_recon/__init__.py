"""Bank statement to payment ledger reconciliation."""

__version__ = "0.1.0"

from .models.transaction import (
    BankTransaction,
    PaymentRecord,
    MatchConfidence,
    ReconciliationMatch,
    ReconciliationSummary,
)
from .parsers.statement_parser import parse_statement
from .matching.engine import ReconciliationEngine, match_transactions_with_payments
from .matching.summary import generate_reconciliation_summary

__all__ = [
    "BankTransaction",
    "PaymentRecord",
    "MatchConfidence",
    "ReconciliationMatch",
    "ReconciliationSummary",
    "parse_statement",
    "ReconciliationEngine",
    "match_transactions_with_payments",
    "generate_reconciliation_summary",
]
