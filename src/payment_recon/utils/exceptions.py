"""Custom exceptions for the reconciliation application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class StatementParseError(ReconciliationError):
    """Error reading a bank statement source."""

    pass


class StatementInputError(StatementParseError):
    """Statement input is not a list of row records."""

    pass


class LedgerParseError(ReconciliationError):
    """Error parsing payment ledger records."""

    pass


class ReconciliationInputError(ReconciliationError):
    """Malformed top-level input passed to the matching engine."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
