"""Shared fixtures for reconciliation tests."""

from datetime import date, timedelta
from decimal import Decimal
import logging

import pytest

from payment_recon.models.transaction import BankTransaction, PaymentRecord

BASE_DATE = date(2025, 3, 1)


@pytest.fixture
def make_txn():
    """Factory for bank transactions; day is an offset from BASE_DATE."""

    def _make(amount, description="DEPOSIT", day=0, reference_id=None):
        return BankTransaction(
            date=BASE_DATE + timedelta(days=day),
            description=description,
            amount=Decimal(amount),
            reference_id=reference_id,
        )

    return _make


@pytest.fixture
def make_payment():
    """Factory for payment records; day=None leaves paid_at unknown."""

    def _make(payment_id, amount, quote_number="", day=0, method="INTERAC"):
        return PaymentRecord(
            id=payment_id,
            amount=Decimal(amount),
            quote_number=quote_number,
            method=method,
            paid_at=None if day is None else BASE_DATE + timedelta(days=day),
        )

    return _make


@pytest.fixture(autouse=True)
def reset_app_logger():
    """CLI runs attach handlers to captured streams; drop them after each test."""
    yield
    logger = logging.getLogger("payment_recon")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
