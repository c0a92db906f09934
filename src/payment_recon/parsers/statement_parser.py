"""
Bank statement ingestion.
Normalizes bank-feed records and CSV statement exports into BankTransaction rows.
"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import StringIO
from pathlib import Path
from typing import Any, Optional, Union
import json
import logging
import re

import pandas as pd

from ..models.transaction import BankTransaction, RowParseError, StatementParseResult
from ..config import ReconConfig
from ..utils.exceptions import StatementInputError, StatementParseError

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"(\d+(\.\d*)?|\.\d+)")
_SEPARATORS = (",", " ", "\u00a0", "$")

# Field aliases accepted in structured records
_REFERENCE_KEYS = ("reference_id", "referenceId", "transaction_id", "reference")
_DESCRIPTION_KEYS = ("description", "name")


def parse_amount(value: Any) -> Decimal:
    """
    Parse a monetary amount into an exact Decimal.

    Accepts thousands separators, a currency symbol, a leading or trailing
    sign and the accounting convention of parentheses for negatives.

    Raises:
        ValueError: If the value is empty or not a number
    """
    if value is None or isinstance(value, bool):
        raise ValueError("missing amount")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError("amount is not finite")
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (value != value or value in (float("inf"), float("-inf"))):
            raise ValueError("amount is not finite")
        return Decimal(str(value))

    text = str(value).strip()
    if not text:
        raise ValueError("missing amount")

    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1].strip()

    for sep in _SEPARATORS:
        text = text.replace(sep, "")

    sign = ""
    if text[:1] in ("-", "+"):
        sign, text = text[0], text[1:]
    elif text[-1:] in ("-", "+"):
        sign, text = text[-1], text[:-1]

    if negative and sign:
        raise ValueError(f"ambiguous sign in amount {value!r}")
    if not _NUMBER_PATTERN.fullmatch(text):
        raise ValueError(f"not a number: {value!r}")

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"not a number: {value!r}") from e

    if negative or sign == "-":
        amount = -amount
    return amount


def parse_date(value: Any, date_format: str) -> date:
    """
    Parse a statement date into a timezone-naive calendar date.

    Raises:
        ValueError: If the value is empty or does not match date_format
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError("missing date")

    try:
        return datetime.strptime(str(value).strip(), date_format).date()
    except ValueError as e:
        raise ValueError(f"date {value!r} does not match format {date_format!r}") from e


class StatementParser:
    """
    Parser for bank statement sources.

    Two shapes are supported: structured records from a bank-feed API and
    the fixed-column CSV export (date, description, debit, credit). Rows
    that fail to parse are reported individually and never abort the batch.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object (defaults if omitted)
        """
        self.config = config or ReconConfig()
        self.statement_config = self.config.input.statement
        self.feed_config = self.config.input.feed

    def parse_statement(
        self,
        rows: Any,
        date_format: Optional[str] = None,
        invert_amounts: bool = False,
    ) -> StatementParseResult:
        """
        Parse generic row records carrying date, amount and description.

        Args:
            rows: List of mappings
            date_format: Date format for string dates (feed format by default)
            invert_amounts: Flip the sign of every amount

        Returns:
            Valid transactions and the per-row errors

        Raises:
            StatementInputError: If rows is not a list of records
        """
        self._check_shape(rows)
        fmt = date_format or self.feed_config.date_format
        result = StatementParseResult()

        for idx, row in enumerate(rows, start=1):
            if not isinstance(row, Mapping):
                self._reject(result, RowParseError(idx, "row", row, "row is not a record"))
                continue

            self._collect(
                result,
                idx,
                date_value=row.get("date"),
                amount_value=row.get("amount"),
                description=_first_present(row, _DESCRIPTION_KEYS),
                reference=_first_present(row, _REFERENCE_KEYS),
                date_format=fmt,
                invert_amounts=invert_amounts,
            )

        logger.info(
            f"Parsed {len(result.transactions)} transactions "
            f"({len(result.errors)} rows rejected)"
        )
        return result

    def parse_feed(self, records: Any) -> StatementParseResult:
        """
        Parse bank-feed API records.

        Pending records are skipped when configured, since they have not
        settled and may still change.
        """
        self._check_shape(records)

        if self.feed_config.skip_pending:
            settled = [
                r for r in records if not (isinstance(r, Mapping) and r.get("pending"))
            ]
            skipped = len(records) - len(settled)
            if skipped:
                logger.debug(f"Skipping {skipped} pending feed records")
            records = settled

        return self.parse_statement(
            records,
            date_format=self.feed_config.date_format,
            invert_amounts=self.feed_config.invert_amounts,
        )

    def parse_csv(self, content: str) -> StatementParseResult:
        """
        Parse the fixed-column CSV statement export.

        Args:
            content: Raw CSV text

        Returns:
            Valid transactions and the per-row errors

        Raises:
            StatementParseError: If the text cannot be read as CSV or lacks
                the required columns
        """
        try:
            df = pd.read_csv(
                StringIO(content),
                sep=self.statement_config.delimiter,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
            )
        except pd.errors.EmptyDataError as e:
            raise StatementParseError("Statement CSV is empty") from e
        except (pd.errors.ParserError, ValueError) as e:
            logger.error(f"Failed to read statement CSV: {e}")
            raise StatementParseError(f"Failed to read statement CSV: {e}") from e

        df.columns = [str(c).strip() for c in df.columns]
        return self._process_dataframe(df)

    def parse_file(self, file_path: Path) -> StatementParseResult:
        """
        Parse a statement file: JSON feed records or a CSV export.

        Raises:
            StatementParseError: If the file cannot be read
        """
        logger.info(f"Parsing statement file: {file_path}")

        try:
            content = file_path.read_text(encoding=self.statement_config.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise StatementParseError(f"Failed to read statement file {file_path}: {e}") from e

        if file_path.suffix.lower() == ".json":
            try:
                payload = json.loads(content)
            except json.JSONDecodeError as e:
                raise StatementParseError(f"Invalid JSON in {file_path}: {e}") from e
            # Feed endpoints wrap records as {"transactions": [...]}
            if isinstance(payload, Mapping) and "transactions" in payload:
                payload = payload["transactions"]
            result = self.parse_feed(payload)
        else:
            result = self.parse_csv(content)

        for error in result.errors:
            error.source = file_path.name
        return result

    def _process_dataframe(self, df: pd.DataFrame) -> StatementParseResult:
        """Convert CSV rows into transactions, collecting row errors."""
        cols = self.statement_config.column_mappings
        date_col = cols.get("date", "Date")
        desc_col = cols.get("description", "Description")
        debit_col = cols.get("debit", "Debit")
        credit_col = cols.get("credit", "Credit")
        ref_col = cols.get("reference", "Reference")

        missing = [c for c in (date_col, desc_col) if c not in df.columns]
        if debit_col not in df.columns and credit_col not in df.columns:
            missing.append(f"{debit_col}/{credit_col}")
        if missing:
            raise StatementParseError(f"Statement CSV is missing columns: {', '.join(missing)}")

        result = StatementParseResult()

        for idx, row in df.iterrows():
            # Header is line 1
            line_no = int(idx) + 2
            try:
                amount = self._row_amount(row, debit_col, credit_col)
            except _CellError as e:
                self._reject(result, RowParseError(line_no, e.field, e.value, str(e)))
                continue

            self._collect(
                result,
                line_no,
                date_value=row.get(date_col),
                amount_value=amount,
                description=row.get(desc_col, ""),
                reference=row.get(ref_col) or None,
                date_format=self.statement_config.date_format,
            )

        logger.info(
            f"Extracted {len(result.transactions)} transactions from statement CSV "
            f"({len(result.errors)} rows rejected)"
        )
        return result

    def _row_amount(self, row: pd.Series, debit_col: str, credit_col: str) -> Decimal:
        """Signed amount from the debit and credit columns."""
        debit_raw = str(row.get(debit_col, "") or "").strip()
        credit_raw = str(row.get(credit_col, "") or "").strip()

        if not debit_raw and not credit_raw:
            raise _CellError("amount", "", "missing amount")

        total = Decimal("0")
        if credit_raw:
            try:
                total += parse_amount(credit_raw)
            except ValueError as e:
                raise _CellError(credit_col, credit_raw, str(e)) from e
        if debit_raw:
            try:
                # Debit column may be signed either way
                total -= abs(parse_amount(debit_raw))
            except ValueError as e:
                raise _CellError(debit_col, debit_raw, str(e)) from e
        return total

    def _collect(
        self,
        result: StatementParseResult,
        row_number: int,
        date_value: Any,
        amount_value: Any,
        description: Any,
        reference: Any,
        date_format: str,
        invert_amounts: bool = False,
    ) -> None:
        try:
            txn_date = parse_date(date_value, date_format)
        except ValueError as e:
            self._reject(result, RowParseError(row_number, "date", date_value, str(e)))
            return

        try:
            amount = parse_amount(amount_value)
        except ValueError as e:
            self._reject(result, RowParseError(row_number, "amount", amount_value, str(e)))
            return

        if invert_amounts:
            amount = -amount

        result.transactions.append(
            BankTransaction(
                date=txn_date,
                description=str(description).strip() if description is not None else "",
                amount=amount,
                reference_id=str(reference).strip() if reference not in (None, "") else None,
            )
        )

    def _reject(self, result: StatementParseResult, error: RowParseError) -> None:
        logger.warning(f"Skipping statement row: {error}")
        result.errors.append(error)

    @staticmethod
    def _check_shape(rows: Any) -> None:
        if not isinstance(rows, (list, tuple)):
            raise StatementInputError(
                f"Statement input must be a list of records, got {type(rows).__name__}"
            )


class _CellError(ValueError):
    """Bad debit/credit cell, carrying the offending column."""

    def __init__(self, field: str, value: Any, message: str):
        super().__init__(message)
        self.field = field
        self.value = value


def _first_present(row: Mapping, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def parse_statement(
    raw: Union[list, tuple], config: Optional[ReconConfig] = None
) -> StatementParseResult:
    """Parse structured statement rows with the default or given configuration."""
    return StatementParser(config).parse_statement(raw)
