"""
Assignment engine for bank transaction to payment reconciliation.
Pairs transactions with payments one-to-one using greedy best-first selection.
"""

from datetime import datetime
from typing import Any, NamedTuple, Optional
import logging

from ..models.transaction import (
    BankTransaction,
    MatchConfidence,
    PaymentRecord,
    ReconciliationMatch,
    ReconciliationSummary,
)
from ..config import ReconConfig
from ..utils.exceptions import ReconciliationInputError
from .scorer import CandidateScore, CandidateScorer
from .summary import generate_reconciliation_summary

logger = logging.getLogger(__name__)

NO_MATCH_REASON = "No matching payment found"


class Candidate(NamedTuple):
    """An eligible (transaction, payment) pair awaiting assignment."""

    txn_index: int
    payment_index: int
    transaction: BankTransaction
    payment: PaymentRecord
    score: CandidateScore


class ReconciliationEngine:
    """
    Main reconciliation engine.

    Every credit transaction is scored against every payment, all eligible
    pairs are ranked together, and pairs are committed best-first as long
    as neither side has been claimed. This is a greedy assignment, not an
    optimal bipartite matching: each commit takes the best remaining pair,
    which does not always give the best total rank over the run. The
    scoring contract is independent of the assignment step, so a weighted
    bipartite matcher can replace it later.

    The engine keeps no state between runs and performs no I/O.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration (defaults if omitted)
        """
        self.config = config or ReconConfig()
        self.scorer = CandidateScorer(self.config.matching)

    def match_transactions_with_payments(
        self,
        transactions: list[BankTransaction],
        payments: list[PaymentRecord],
    ) -> list[ReconciliationMatch]:
        """
        Match bank transactions with recorded payments.

        Args:
            transactions: Ingested bank transactions
            payments: Recorded payments from the ledger

        Returns:
            One match per credit transaction, in input order. Debits and
            zero-amount transactions are left out.

        Raises:
            ReconciliationInputError: If either argument is not a list of
                the expected record type
        """
        _check_sequence(transactions, BankTransaction, "transactions")
        _check_sequence(payments, PaymentRecord, "payments")

        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(transactions)} transactions, "
            f"{len(payments)} payments"
        )

        candidates = self._collect_candidates(transactions, payments)
        candidates.sort(key=_candidate_sort_key)

        # Keyed on payment id: one id settles at most one credit
        claimed_payments: set[str] = set()
        committed: dict[int, Candidate] = {}

        for candidate in candidates:
            if candidate.txn_index in committed or candidate.payment.id in claimed_payments:
                continue
            committed[candidate.txn_index] = candidate
            claimed_payments.add(candidate.payment.id)
            logger.debug(
                f"Matched {candidate.transaction.date} {candidate.transaction.amount} "
                f"to payment {candidate.payment.id} ({candidate.score.tier.value}: "
                f"{candidate.score.reason})"
            )

        matches: list[ReconciliationMatch] = []
        for idx, txn in enumerate(transactions):
            if not txn.is_credit:
                continue

            candidate = committed.get(idx)
            if candidate is None:
                matches.append(
                    ReconciliationMatch(
                        transaction=txn,
                        payment=None,
                        match_confidence=MatchConfidence.NONE,
                        match_reason=NO_MATCH_REASON,
                    )
                )
                continue

            matches.append(
                ReconciliationMatch(
                    transaction=txn,
                    payment=candidate.payment,
                    match_confidence=candidate.score.tier,
                    match_reason=candidate.score.reason,
                    date_delta_days=candidate.score.date_delta_days,
                    rank=candidate.score.rank,
                )
            )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(candidates)} candidates, "
            f"{len(committed)} matched, {len(matches) - len(committed)} unmatched"
        )

        return matches

    def _collect_candidates(
        self,
        transactions: list[BankTransaction],
        payments: list[PaymentRecord],
    ) -> list[Candidate]:
        """
        Score every transaction against every payment.

        Returns:
            Flat list of eligible candidates, unsorted
        """
        candidates: list[Candidate] = []

        for t_idx, txn in enumerate(transactions):
            if not txn.is_credit:
                continue
            for p_idx, payment in enumerate(payments):
                score = self.scorer.score(txn, payment)
                if score is not None:
                    candidates.append(Candidate(t_idx, p_idx, txn, payment, score))

        return candidates

    def generate_summary(self, matches: list[ReconciliationMatch]) -> ReconciliationSummary:
        """Roll a match list up into a summary."""
        return generate_reconciliation_summary(matches)


def _candidate_sort_key(candidate: Candidate) -> tuple:
    # Best rank first, then earliest transaction, then lowest payment id;
    # input positions settle anything left so runs are reproducible
    return (
        -candidate.score.rank,
        candidate.transaction.date,
        candidate.payment.id,
        candidate.txn_index,
        candidate.payment_index,
    )


def _check_sequence(items: Any, item_type: type, name: str) -> None:
    if not isinstance(items, (list, tuple)):
        raise ReconciliationInputError(
            f"{name} must be a list, got {type(items).__name__}"
        )
    for idx, item in enumerate(items):
        if not isinstance(item, item_type):
            raise ReconciliationInputError(
                f"{name}[{idx}] must be a {item_type.__name__}, got {type(item).__name__}"
            )


def match_transactions_with_payments(
    transactions: list[BankTransaction],
    payments: list[PaymentRecord],
    config: Optional[ReconConfig] = None,
) -> list[ReconciliationMatch]:
    """Match transactions to payments with the default or given configuration."""
    return ReconciliationEngine(config).match_transactions_with_payments(transactions, payments)
