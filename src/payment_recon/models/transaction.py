"""Data models for bank transactions, payments and reconciliation results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class MatchConfidence(str, Enum):
    """Confidence tier assigned to a reconciliation match."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"  # Transaction matched no payment at all


@dataclass(frozen=True)
class BankTransaction:
    """
    One row from a bank source (feed record or CSV statement line).

    Transactions are immutable once ingested. The amount is signed:
    positive values are credits (deposits), negative values are debits.
    """

    date: date
    description: str
    amount: Decimal

    # Bank-assigned id, only used to detect re-imports
    reference_id: Optional[str] = None

    def __post_init__(self):
        # Feeds may hand over timestamps; matching works on calendar days
        object.__setattr__(self, "date", _calendar_date(self.date))

    @property
    def is_credit(self) -> bool:
        return self.amount > 0

    @property
    def dedup_key(self) -> tuple:
        """Identity used when merging repeated imports of the same source."""
        if self.reference_id:
            return ("ref", self.reference_id)
        return ("row", self.date, self.amount, self.description)


@dataclass(frozen=True)
class PaymentRecord:
    """A recorded payment that is expected to show up as a bank credit."""

    id: str
    amount: Decimal
    quote_number: str
    method: str = ""
    paid_at: Optional[date] = None

    def __post_init__(self):
        if self.paid_at is not None:
            object.__setattr__(self, "paid_at", _calendar_date(self.paid_at))


@dataclass
class RowParseError:
    """A source row that was dropped during statement ingestion."""

    row_number: int
    field: str
    value: Any
    message: str

    # Statement file name, set when rows come from a file
    source: Optional[str] = None

    def __str__(self) -> str:
        location = f"{self.source} row {self.row_number}" if self.source else f"Row {self.row_number}"
        return f"{location}: {self.message} ({self.field}={self.value!r})"


@dataclass
class StatementParseResult:
    """Valid transactions recovered from a statement plus per-row errors."""

    transactions: list[BankTransaction] = field(default_factory=list)
    errors: list[RowParseError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class ReconciliationMatch:
    """
    Correspondence between a bank transaction and at most one payment.

    Matches are a derived view. They are rebuilt on every reconciliation
    run and are never stored.
    """

    transaction: BankTransaction
    payment: Optional[PaymentRecord]
    match_confidence: MatchConfidence
    match_reason: str

    # Scoring details kept for reports
    date_delta_days: Optional[int] = None
    rank: Optional[int] = None

    @property
    def is_matched(self) -> bool:
        return self.payment is not None


@dataclass
class TierCounts:
    """Number of matches per confidence tier."""

    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low


@dataclass
class ReconciliationSummary:
    """Roll-up of a reconciliation run."""

    total_transactions: int
    matched: TierCounts
    unmatched: int

    # Amount totals
    total_credits: Decimal
    matched_amount: Decimal
    unmatched_amount: Decimal

    @property
    def matched_count(self) -> int:
        return self.matched.total

    @property
    def match_rate(self) -> float:
        """Percentage of credit transactions matched to a payment."""
        if self.total_transactions == 0:
            return 0.0
        return (self.matched_count / self.total_transactions) * 100


def _calendar_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value

