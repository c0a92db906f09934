"""Merging of repeated statement imports."""

from typing import Iterable
import logging

from ..models.transaction import BankTransaction

logger = logging.getLogger(__name__)


def transaction_key(txn: BankTransaction) -> tuple:
    """
    Identity of a transaction across imports.

    The bank reference id when the source provides one, otherwise the
    (date, amount, description) triple.
    """
    return txn.dedup_key


def merge_transactions(
    existing: Iterable[BankTransaction],
    incoming: Iterable[BankTransaction],
) -> tuple[list[BankTransaction], list[BankTransaction]]:
    """
    Merge newly ingested transactions into an existing set.

    Existing records keep their order and are never replaced. Incoming
    records are appended in order unless their key belongs to an existing
    record. Repeats inside the incoming batch are kept: a statement without
    reference ids can list two real deposits with the same date, amount
    and description.

    Args:
        existing: Previously ingested transactions
        incoming: Transactions from a new import

    Returns:
        Tuple of (merged transactions, skipped duplicates)
    """
    merged = list(existing)
    known = {transaction_key(txn) for txn in merged}

    duplicates: list[BankTransaction] = []
    for txn in incoming:
        if transaction_key(txn) in known:
            duplicates.append(txn)
            continue
        merged.append(txn)

    if duplicates:
        logger.info(f"Skipped {len(duplicates)} previously imported transactions")

    return merged, duplicates
