"""
Payment ledger parser.
Converts ledger exports and audit-trail entries into PaymentRecord objects.
"""

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any, Optional
import json
import logging

import pandas as pd

from ..models.transaction import PaymentRecord
from ..config import ReconConfig
from ..utils.exceptions import LedgerParseError
from .statement_parser import parse_amount, parse_date

logger = logging.getLogger(__name__)


class PaymentLedgerParser:
    """
    Parser for recorded payments.

    The ledger is an internal, trusted source, so a row that cannot be
    read fails the whole load instead of being skipped.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()
        self.ledger_config = self.config.input.ledger

    def parse_records(self, rows: Any) -> list[PaymentRecord]:
        """
        Parse plain payment records.

        Each record carries id, amount, quote_number (or quoteNumber),
        method and paid_at (or paidAt, may be null).

        Raises:
            LedgerParseError: If rows is not a list, a record is invalid
                or an id repeats
        """
        self._check_shape(rows)
        payments: list[PaymentRecord] = []

        for idx, row in enumerate(rows, start=1):
            if not isinstance(row, Mapping):
                raise LedgerParseError(f"Payment {idx}: record is not a mapping")

            payments.append(
                self._build_payment(
                    idx,
                    payment_id=row.get("id"),
                    amount=row.get("amount"),
                    quote_number=_first(row, "quote_number", "quoteNumber"),
                    method=row.get("method"),
                    paid_at=_first(row, "paid_at", "paidAt"),
                )
            )

        _check_unique_ids(payments)
        logger.info(f"Loaded {len(payments)} payment records")
        return payments

    def parse_audit_entries(self, entries: Any) -> list[PaymentRecord]:
        """
        Parse financial audit-trail entries into payments.

        Only PAYMENT entries are used. The quote number is the document
        number without its payment prefix and the method is the first word
        of the entry description.

        Raises:
            LedgerParseError: If entries is not a list or an entry is invalid
        """
        if isinstance(entries, Mapping) and "entries" in entries:
            entries = entries["entries"]
        self._check_shape(entries)

        prefix = self.ledger_config.document_prefix
        payments: list[PaymentRecord] = []

        for idx, entry in enumerate(entries, start=1):
            if not isinstance(entry, Mapping):
                raise LedgerParseError(f"Entry {idx}: not a mapping")
            entry_type = entry.get("type")
            if entry_type and str(entry_type).upper() != "PAYMENT":
                continue

            document_number = str(entry.get("documentNumber") or "")
            if prefix and document_number.startswith(prefix):
                document_number = document_number[len(prefix):]

            description = str(entry.get("description") or "").split()
            payments.append(
                self._build_payment(
                    idx,
                    payment_id=entry.get("id"),
                    amount=entry.get("amount"),
                    quote_number=document_number,
                    method=description[0] if description else "",
                    paid_at=entry.get("date"),
                )
            )

        _check_unique_ids(payments)
        logger.info(f"Loaded {len(payments)} payments from audit trail")
        return payments

    def parse_file(self, file_path: Path) -> list[PaymentRecord]:
        """
        Parse a ledger export: JSON records, a JSON audit-trail payload or CSV.

        Raises:
            LedgerParseError: If the file cannot be read or is invalid
        """
        logger.info(f"Parsing payment ledger: {file_path}")

        if file_path.suffix.lower() == ".json":
            try:
                payload = json.loads(file_path.read_text(encoding=self.ledger_config.encoding))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                raise LedgerParseError(f"Failed to read ledger file {file_path}: {e}") from e

            if _looks_like_audit_trail(payload):
                return self.parse_audit_entries(payload)
            return self.parse_records(payload)

        try:
            df = pd.read_csv(
                file_path,
                encoding=self.ledger_config.encoding,
                delimiter=self.ledger_config.delimiter,
                dtype=str,
                keep_default_na=False,
            )
        except Exception as e:
            logger.error(f"Failed to read ledger CSV: {e}")
            raise LedgerParseError(f"Failed to read ledger CSV: {e}") from e

        return self.parse_records(self._dataframe_records(df))

    def _dataframe_records(self, df: pd.DataFrame) -> list[dict[str, Any]]:
        """Rename configured CSV columns to record keys."""
        mappings = self.ledger_config.column_mappings
        required = [mappings.get(k, k) for k in ("id", "amount")]
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise LedgerParseError(f"Ledger CSV is missing columns: {', '.join(missing)}")

        renamed = df.rename(columns={col: key for key, col in mappings.items()})
        return renamed.to_dict(orient="records")

    def _build_payment(
        self,
        idx: int,
        payment_id: Any,
        amount: Any,
        quote_number: Any,
        method: Any,
        paid_at: Any,
    ) -> PaymentRecord:
        if payment_id in (None, ""):
            raise LedgerParseError(f"Payment {idx}: missing id")

        try:
            parsed_amount = parse_amount(amount)
        except ValueError as e:
            raise LedgerParseError(f"Payment {payment_id}: invalid amount: {e}") from e
        if parsed_amount <= 0:
            raise LedgerParseError(f"Payment {payment_id}: amount must be positive, got {parsed_amount}")

        return PaymentRecord(
            id=str(payment_id),
            amount=parsed_amount,
            quote_number=str(quote_number or "").strip(),
            method=str(method or "").strip(),
            paid_at=self._parse_paid_at(payment_id, paid_at),
        )

    def _parse_paid_at(self, payment_id: Any, value: Any) -> Optional[date]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        try:
            return parse_date(value, self.ledger_config.date_format)
        except ValueError:
            # Audit entries carry full ISO timestamps
            try:
                return pd.to_datetime(value).date()
            except (ValueError, TypeError) as e:
                raise LedgerParseError(f"Payment {payment_id}: invalid paid_at {value!r}") from e

    @staticmethod
    def _check_shape(rows: Any) -> None:
        if not isinstance(rows, (list, tuple)):
            raise LedgerParseError(
                f"Payment input must be a list of records, got {type(rows).__name__}"
            )


def _check_unique_ids(payments: list[PaymentRecord]) -> None:
    seen: set[str] = set()
    for payment in payments:
        if payment.id in seen:
            raise LedgerParseError(f"Payment {payment.id}: duplicate id")
        seen.add(payment.id)


def _first(row: Mapping, *keys: str) -> Any:
    for key in keys:
        if row.get(key) not in (None, ""):
            return row.get(key)
    return None


def _looks_like_audit_trail(payload: Any) -> bool:
    if isinstance(payload, Mapping):
        return "entries" in payload
    if isinstance(payload, list) and payload and isinstance(payload[0], Mapping):
        return "documentNumber" in payload[0]
    return False
