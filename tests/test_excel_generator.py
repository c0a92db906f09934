"""Tests for the Excel reconciliation report."""

from openpyxl import load_workbook

from payment_recon.config import ReconConfig
from payment_recon.matching.engine import ReconciliationEngine
from payment_recon.models.transaction import RowParseError
from payment_recon.reports.excel_generator import ExcelReportGenerator


def _run(make_txn, make_payment):
    engine = ReconciliationEngine()
    matches = engine.match_transactions_with_payments(
        [make_txn("500.00", "E-TRANSFER REF 1042"), make_txn("80.00", "MOBILE DEPOSIT")],
        [make_payment("p1", "500.00", "1042")],
    )
    return matches, engine.generate_summary(matches)


def test_report_sheets_and_rows(tmp_path, make_txn, make_payment):
    matches, summary = _run(make_txn, make_payment)
    errors = [RowParseError(4, "date", "bad-date", "missing date", source="statement.csv")]
    output = tmp_path / "out" / "report.xlsx"

    path = ExcelReportGenerator().generate_report(
        summary, matches, output, parse_errors=errors, sources=["statement.csv"]
    )

    wb = load_workbook(path)
    assert wb.sheetnames == ["Summary", "Matches", "Unmatched", "Parse Errors"]

    ws = wb["Matches"]
    assert ws.cell(row=1, column=1).value == "Date"
    assert ws.cell(row=2, column=5).value == "p1"
    assert ws.cell(row=2, column=10).value == "High"
    assert ws.cell(row=3, column=10).value == "Unmatched"
    assert ws.cell(row=3, column=12).value == "No matching payment found"

    unmatched = wb["Unmatched"]
    assert unmatched.max_row == 2
    assert unmatched.cell(row=2, column=2).value == "MOBILE DEPOSIT"

    assert wb["Parse Errors"].cell(row=2, column=1).value == 4
    assert wb["Parse Errors"].cell(row=2, column=5).value == "statement.csv"


def test_parse_errors_sheet_omitted_without_errors(tmp_path, make_txn, make_payment):
    matches, summary = _run(make_txn, make_payment)

    path = ExcelReportGenerator().generate_report(summary, matches, tmp_path / "report.xlsx")

    assert "Parse Errors" not in load_workbook(path).sheetnames


def test_disabled_and_renamed_sheets(tmp_path, make_txn, make_payment):
    config = ReconConfig()
    config.output.sheets.unmatched.enabled = False
    config.output.sheets.matches.name = "All Credits"
    matches, summary = _run(make_txn, make_payment)

    path = ExcelReportGenerator(config).generate_report(summary, matches, tmp_path / "report.xlsx")

    assert load_workbook(path).sheetnames == ["Summary", "All Credits"]
