"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..models.transaction import (
    MatchConfidence,
    ReconciliationMatch,
    ReconciliationSummary,
    RowParseError,
)
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
CONFIDENCE_FILLS = {
    MatchConfidence.HIGH: PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"),
    MatchConfidence.MEDIUM: PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid"),
    MatchConfidence.LOW: PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid"),
    MatchConfidence.NONE: PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid"),
}
CONFIDENCE_LABELS = {
    MatchConfidence.HIGH: "High",
    MatchConfidence.MEDIUM: "Medium",
    MatchConfidence.LOW: "Low",
    MatchConfidence.NONE: "Unmatched",
}
AMOUNT_FORMAT = "#,##0.00"


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.sheet_config = self.config.output.sheets

    def generate_report(
        self,
        summary: ReconciliationSummary,
        matches: list[ReconciliationMatch],
        output_path: Path,
        parse_errors: Optional[list[RowParseError]] = None,
        sources: Optional[list[str]] = None,
    ) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            summary: Reconciliation summary
            matches: Engine output, in transaction order
            output_path: Path for output file
            parse_errors: Statement rows rejected during ingestion
            sources: Names of the statement and ledger files used

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        if self.sheet_config.summary.enabled:
            self._create_summary_sheet(wb, summary, sources or [])

        if self.sheet_config.matches.enabled:
            self._create_matches_sheet(wb, matches)

        if self.sheet_config.unmatched.enabled:
            self._create_unmatched_sheet(wb, [m for m in matches if not m.is_matched])

        if self.sheet_config.parse_errors.enabled and parse_errors:
            self._create_parse_errors_sheet(wb, parse_errors)

        # openpyxl refuses to save a workbook without sheets
        if not wb.sheetnames:
            wb.create_sheet(self.sheet_config.summary.name)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self, wb: Workbook, summary: ReconciliationSummary, sources: list[str]
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Payment Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        ws["A3"] = "Generated At:"
        ws["B3"] = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        ws["A4"] = "Config File:"
        ws["B4"] = self.config.config_file_path or "Default"

        row = 5
        for source in sources:
            ws[f"A{row}"] = "Source:"
            ws[f"B{row}"] = source
            row += 1

        row += 1
        ws[f"A{row}"] = "Transaction Counts"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        count_data = [
            ("Total Transactions:", summary.total_transactions),
            ("High Confidence:", summary.matched.high),
            ("Medium Confidence:", summary.matched.medium),
            ("Low Confidence:", summary.matched.low),
            ("Unmatched:", summary.unmatched),
            ("Match Rate:", f"{summary.match_rate:.1f}%"),
        ]
        for label, value in count_data:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = value
            row += 1

        row += 1
        ws[f"A{row}"] = "Amount Totals"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        amount_data = [
            ("Total Credits:", summary.total_credits),
            ("Matched Amount:", summary.matched_amount),
            ("Unmatched Amount:", summary.unmatched_amount),
        ]
        for label, value in amount_data:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = float(value)
            ws[f"B{row}"].number_format = AMOUNT_FORMAT
            row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matches_sheet(self, wb: Workbook, matches: list[ReconciliationMatch]) -> None:
        """Create the transaction matches sheet, one row per credit."""
        ws = wb.create_sheet(self.sheet_config.matches.name)

        headers = [
            "Date",
            "Description",
            "Amount",
            "Bank Reference",
            "Payment ID",
            "Quote #",
            "Method",
            "Payment Date",
            "Payment Amount",
            "Confidence",
            "Date Delta (Days)",
            "Reason",
        ]
        self._write_headers(ws, headers)

        for row_num, match in enumerate(matches, start=2):
            txn = match.transaction
            payment = match.payment

            row_data = [
                txn.date,
                txn.description,
                float(txn.amount),
                txn.reference_id or "",
                payment.id if payment else "",
                payment.quote_number if payment else "",
                payment.method if payment else "",
                payment.paid_at if payment and payment.paid_at else "",
                float(payment.amount) if payment else "",
                CONFIDENCE_LABELS[match.match_confidence],
                match.date_delta_days if match.date_delta_days is not None else "",
                match.match_reason,
            ]

            fill = CONFIDENCE_FILLS[match.match_confidence]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if col == 10:
                    cell.fill = fill
                if col in (3, 9) and value != "":
                    cell.number_format = AMOUNT_FORMAT

        self._auto_fit_columns(ws)

    def _create_unmatched_sheet(
        self, wb: Workbook, unmatched: list[ReconciliationMatch]
    ) -> None:
        """Create the sheet of credits with no matching payment."""
        ws = wb.create_sheet(self.sheet_config.unmatched.name)

        headers = ["Date", "Description", "Amount", "Bank Reference"]
        self._write_headers(ws, headers)

        for row_num, match in enumerate(unmatched, start=2):
            txn = match.transaction
            row_data = [txn.date, txn.description, float(txn.amount), txn.reference_id or ""]

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = CONFIDENCE_FILLS[MatchConfidence.NONE]
                if col == 3:
                    cell.number_format = AMOUNT_FORMAT

        self._auto_fit_columns(ws)

    def _create_parse_errors_sheet(self, wb: Workbook, errors: list[RowParseError]) -> None:
        """Create the sheet listing statement rows that were skipped."""
        ws = wb.create_sheet(self.sheet_config.parse_errors.name)

        headers = ["Row", "Field", "Value", "Problem", "File"]
        self._write_headers(ws, headers)

        for row_num, error in enumerate(errors, start=2):
            row_data = [
                error.row_number,
                error.field,
                str(error.value),
                error.message,
                error.source or "",
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER

        self._auto_fit_columns(ws)

    @staticmethod
    def _write_headers(ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            column = column_cells[0].column_letter
            ws.column_dimensions[column].width = min(max_length + 2, 50)
