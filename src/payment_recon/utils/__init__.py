"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    StatementParseError,
    StatementInputError,
    LedgerParseError,
    ReconciliationInputError,
    ConfigurationError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "StatementParseError",
    "StatementInputError",
    "LedgerParseError",
    "ReconciliationInputError",
    "ConfigurationError",
    "ReportGenerationError",
    "setup_logging",
]
