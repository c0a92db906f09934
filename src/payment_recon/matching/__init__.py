"""Matching engine, candidate scorer and summary."""

from .engine import ReconciliationEngine, match_transactions_with_payments
from .scorer import (
    CandidateScore,
    CandidateScorer,
    TierRule,
    HighConfidenceRule,
    MediumConfidenceRule,
    LowConfidenceRule,
)
from .summary import generate_reconciliation_summary

__all__ = [
    "ReconciliationEngine",
    "match_transactions_with_payments",
    "CandidateScore",
    "CandidateScorer",
    "TierRule",
    "HighConfidenceRule",
    "MediumConfidenceRule",
    "LowConfidenceRule",
    "generate_reconciliation_summary",
]
