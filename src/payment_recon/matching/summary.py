"""Roll-up of reconciliation matches into totals by tier and amount."""

from decimal import Decimal
import logging

from ..models.transaction import (
    MatchConfidence,
    ReconciliationMatch,
    ReconciliationSummary,
    TierCounts,
)
from ..utils.exceptions import ReconciliationInputError

logger = logging.getLogger(__name__)


def generate_reconciliation_summary(matches: list[ReconciliationMatch]) -> ReconciliationSummary:
    """
    Summarize a list of matches.

    Every match counts towards the total and the credit total. Amounts of
    high, medium and low matches go to the matched amount, the rest to the
    unmatched amount. No rounding is applied.

    Args:
        matches: Output of the assignment engine

    Returns:
        Reconciliation summary
    """
    if not isinstance(matches, (list, tuple)):
        raise ReconciliationInputError(f"matches must be a list, got {type(matches).__name__}")

    counts = TierCounts()
    unmatched = 0
    total_credits = Decimal("0")
    matched_amount = Decimal("0")
    unmatched_amount = Decimal("0")

    for match in matches:
        amount = match.transaction.amount
        total_credits += amount

        confidence = match.match_confidence
        if confidence == MatchConfidence.HIGH:
            counts.high += 1
        elif confidence == MatchConfidence.MEDIUM:
            counts.medium += 1
        elif confidence == MatchConfidence.LOW:
            counts.low += 1
        else:
            unmatched += 1
            unmatched_amount += amount
            continue

        matched_amount += amount

    summary = ReconciliationSummary(
        total_transactions=len(matches),
        matched=counts,
        unmatched=unmatched,
        total_credits=total_credits,
        matched_amount=matched_amount,
        unmatched_amount=unmatched_amount,
    )
    logger.debug(
        f"Summary: {summary.total_transactions} transactions, "
        f"{summary.matched_count} matched, {summary.unmatched} unmatched"
    )
    return summary
