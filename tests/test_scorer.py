"""Tests for candidate scoring and confidence tiers."""

import pytest

from payment_recon.config import MatchingConfig, TierWeights
from payment_recon.matching.scorer import CandidateScorer
from payment_recon.models.transaction import MatchConfidence


@pytest.fixture
def scorer():
    return CandidateScorer()


def test_quote_hit_same_day_is_high(scorer, make_txn, make_payment):
    txn = make_txn("500.00", "E-TRANSFER REF 1042")
    payment = make_payment("p1", "500.00", "1042", day=0)

    score = scorer.score(txn, payment)

    assert score.tier == MatchConfidence.HIGH
    assert score.rank == 1000
    assert score.reason == "exact amount + quote #1042 in description + same-day"
    assert score.quote_hit is True
    assert score.date_delta_days == 0


def test_old_payment_without_quote_is_low(scorer, make_txn, make_payment):
    txn = make_txn("500.00", "E-TRANSFER REF 1042")
    payment = make_payment("p1", "500.00", "2077", day=-28)

    score = scorer.score(txn, payment)

    assert score.tier == MatchConfidence.LOW
    assert score.rank == 10 - 28
    assert score.reason == "exact amount + 28 days apart"


def test_close_date_without_quote_is_medium(scorer, make_txn, make_payment):
    score = scorer.score(make_txn("120.00", day=5), make_payment("p1", "120.00", "88"))

    assert score.tier == MatchConfidence.MEDIUM
    assert score.rank == 95
    assert score.reason == "exact amount + 5 days apart"


def test_quote_hit_outside_high_window_drops_to_medium(scorer, make_txn, make_payment):
    txn = make_txn("120.00", "CHEQUE DEP 1042", day=4)
    score = scorer.score(txn, make_payment("p1", "120.00", "1042"))

    assert score.tier == MatchConfidence.MEDIUM
    assert score.rank == 96
    assert "quote #1042 in description" in score.reason


@pytest.mark.parametrize(
    "day, quote, expected",
    [
        (3, "1042", MatchConfidence.HIGH),
        (-3, "1042", MatchConfidence.HIGH),
        (10, "9999", MatchConfidence.MEDIUM),
        (-10, "9999", MatchConfidence.MEDIUM),
        (11, "9999", MatchConfidence.LOW),
        (11, "1042", MatchConfidence.LOW),
    ],
)
def test_tier_window_boundaries(scorer, make_txn, make_payment, day, quote, expected):
    txn = make_txn("80.00", "REF 1042", day=day)
    assert scorer.score(txn, make_payment("p1", "80.00", quote)).tier == expected


def test_missing_payment_date_with_quote_is_high(scorer, make_txn, make_payment):
    txn = make_txn("250.00", "WIRE 1042", day=40)
    score = scorer.score(txn, make_payment("p1", "250.00", "1042", day=None))

    assert score.tier == MatchConfidence.HIGH
    assert score.rank == 1000
    assert score.date_delta_days is None
    assert score.reason == "exact amount + quote #1042 in description + no payment date"


def test_missing_payment_date_without_quote_is_low(scorer, make_txn, make_payment):
    score = scorer.score(make_txn("250.00"), make_payment("p1", "250.00", "77", day=None))

    assert score.tier == MatchConfidence.LOW
    assert score.rank == 10
    assert score.reason == "exact amount + no payment date"


def test_single_day_reason_is_singular(scorer, make_txn, make_payment):
    score = scorer.score(make_txn("10.00", day=1), make_payment("p1", "10.00"))
    assert score.reason == "exact amount + 1 day apart"


def test_amount_must_match_to_the_cent(scorer, make_txn, make_payment):
    assert scorer.score(make_txn("500.00"), make_payment("p1", "500.01")) is None


def test_amount_scale_does_not_matter(scorer, make_txn, make_payment):
    txn = make_txn("500")
    payment = make_payment("p1", "500.00")
    assert txn.amount == payment.amount
    assert scorer.score(txn, payment) is not None


@pytest.mark.parametrize("amount", ["-500.00", "0.00"])
def test_non_credits_are_ineligible(scorer, make_txn, make_payment, amount):
    assert scorer.score(make_txn(amount), make_payment("p1", "500.00")) is None


def test_digit_only_quote_form_matches(scorer):
    assert scorer.quote_in_description("Q-1042", "ETRANSFER 1042 SMITH")


def test_quote_match_is_case_sensitive_by_default(scorer):
    assert not scorer.quote_in_description("inv-abc", "PAYMENT INV-ABC")
    assert scorer.quote_in_description("INV-ABC", "PAYMENT INV-ABC")


def test_case_insensitive_quote_match():
    scorer = CandidateScorer(MatchingConfig(case_sensitive=False))
    assert scorer.quote_in_description("inv-abc", "PAYMENT INV-ABC")


def test_digit_only_form_can_be_disabled():
    scorer = CandidateScorer(MatchingConfig(digit_only_quote=False))
    assert not scorer.quote_in_description("Q-1042", "ETRANSFER 1042")


@pytest.mark.parametrize("quote", ["", "   ", None])
def test_blank_quote_never_hits(scorer, quote):
    assert not scorer.quote_in_description(quote, "ANY DESCRIPTION")


def test_custom_weights_change_rank(make_txn, make_payment):
    config = MatchingConfig(weights=TierWeights(high=500, medium=50, low=5))
    score = CandidateScorer(config).score(make_txn("10.00", day=2), make_payment("p1", "10.00"))
    assert score.rank == 48


def test_ranks_never_cross_tiers(scorer, make_txn, make_payment):
    worst_high = scorer.score(make_txn("1.00", "1042", day=3), make_payment("a", "1.00", "1042"))
    best_medium = scorer.score(make_txn("1.00"), make_payment("b", "1.00", "x"))
    worst_medium = scorer.score(make_txn("1.00", day=10), make_payment("c", "1.00", "x"))
    best_low = scorer.score(make_txn("1.00"), make_payment("d", "1.00", "x", day=None))

    assert worst_high.rank > best_medium.rank
    assert worst_medium.rank > best_low.rank
    assert worst_high.rank == 997
