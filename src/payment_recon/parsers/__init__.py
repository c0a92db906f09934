"""Parsers for bank statements and payment ledger exports."""

from .statement_parser import StatementParser, parse_statement, parse_amount, parse_date
from .ledger_parser import PaymentLedgerParser
from .dedup import merge_transactions, transaction_key

__all__ = [
    "StatementParser",
    "parse_statement",
    "parse_amount",
    "parse_date",
    "PaymentLedgerParser",
    "merge_transactions",
    "transaction_key",
]
