"""
Candidate scoring for (bank transaction, payment) pairs.
Each confidence tier is a rule; the first rule that holds decides the tier.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import re

from ..models.transaction import BankTransaction, MatchConfidence, PaymentRecord
from ..config import MatchingConfig

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class PairFacts:
    """Facts about an amount-matched pair that the tier rules look at."""

    quote_hit: bool
    has_payment_date: bool
    # Zero when the payment has no recorded date
    date_delta_days: int


@dataclass(frozen=True)
class CandidateScore:
    """Tier, ordering rank and explanation for one eligible pair."""

    tier: MatchConfidence
    rank: int
    reason: str
    date_delta_days: Optional[int]
    quote_hit: bool


class TierRule(ABC):
    """Abstract base class for confidence tier rules."""

    tier: MatchConfidence

    @abstractmethod
    def applies(self, facts: PairFacts) -> bool:
        """
        Check whether a pair qualifies for this tier.

        Args:
            facts: Facts about a pair whose amounts already match exactly

        Returns:
            True if the pair belongs in this tier
        """
        pass


class HighConfidenceRule(TierRule):
    """Quote number found in the description and dates close together."""

    tier = MatchConfidence.HIGH

    def __init__(self, max_date_delta_days: int = 3):
        self.max_date_delta_days = max_date_delta_days

    def applies(self, facts: PairFacts) -> bool:
        return facts.quote_hit and facts.date_delta_days <= self.max_date_delta_days


class MediumConfidenceRule(TierRule):
    """Known payment date within the medium window."""

    tier = MatchConfidence.MEDIUM

    def __init__(self, max_date_delta_days: int = 10):
        self.max_date_delta_days = max_date_delta_days

    def applies(self, facts: PairFacts) -> bool:
        return facts.has_payment_date and facts.date_delta_days <= self.max_date_delta_days


class LowConfidenceRule(TierRule):
    """Fallback: the amount matches and nothing else does."""

    tier = MatchConfidence.LOW

    def applies(self, facts: PairFacts) -> bool:
        return True


class CandidateScorer:
    """
    Scores a single transaction against a single payment.

    Pairs are only eligible when the transaction is a credit and the
    payment amount equals it to the cent. Eligible pairs are placed in the
    first tier whose rule holds and ranked by tier weight minus the date
    distance in days.
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        """
        Initialize the scorer.

        Args:
            config: Matching configuration (defaults if omitted)
        """
        self.config = config or MatchingConfig()
        self.rules: list[TierRule] = [
            HighConfidenceRule(self.config.high_max_date_delta_days),
            MediumConfidenceRule(self.config.medium_max_date_delta_days),
            LowConfidenceRule(),
        ]
        self.weights = {
            MatchConfidence.HIGH: self.config.weights.high,
            MatchConfidence.MEDIUM: self.config.weights.medium,
            MatchConfidence.LOW: self.config.weights.low,
        }

    def score(
        self, transaction: BankTransaction, payment: PaymentRecord
    ) -> Optional[CandidateScore]:
        """
        Score a candidate pair.

        Args:
            transaction: Bank transaction
            payment: Recorded payment

        Returns:
            CandidateScore, or None if the pair can never match
        """
        if transaction.amount <= 0 or payment.amount != transaction.amount:
            return None

        has_payment_date = payment.paid_at is not None
        delta = (
            abs((transaction.date - payment.paid_at).days)
            if has_payment_date
            else 0
        )
        facts = PairFacts(
            quote_hit=self.quote_in_description(payment.quote_number, transaction.description),
            has_payment_date=has_payment_date,
            date_delta_days=delta,
        )

        for rule in self.rules:
            if rule.applies(facts):
                return CandidateScore(
                    tier=rule.tier,
                    rank=self.weights[rule.tier] - delta,
                    reason=self._build_reason(payment, facts),
                    date_delta_days=delta if has_payment_date else None,
                    quote_hit=facts.quote_hit,
                )

        return None

    def quote_in_description(self, quote_number: str, description: str) -> bool:
        """Check whether a quote number, or its digits, appears in a description."""
        quote = (quote_number or "").strip()
        if not quote or not description:
            return False

        haystack = description if self.config.case_sensitive else description.upper()
        needle = quote if self.config.case_sensitive else quote.upper()
        if needle in haystack:
            return True

        if self.config.digit_only_quote:
            digits = _NON_DIGITS.sub("", quote)
            if digits and digits in description:
                return True

        return False

    @staticmethod
    def _build_reason(payment: PaymentRecord, facts: PairFacts) -> str:
        parts = ["exact amount"]
        if facts.quote_hit:
            parts.append(f"quote #{payment.quote_number} in description")

        if not facts.has_payment_date:
            parts.append("no payment date")
        elif facts.date_delta_days == 0:
            parts.append("same-day")
        else:
            unit = "day" if facts.date_delta_days == 1 else "days"
            parts.append(f"{facts.date_delta_days} {unit} apart")

        return " + ".join(parts)
