"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from payment_recon.cli import main

STATEMENT_CSV = (
    "Date;Description;Debit;Credit\n"
    "2025-03-01;E-TRANSFER REF 1042;;500.00\n"
    "2025-03-02;HYDRO;75.00;\n"
    "2025-03-03;MOBILE DEPOSIT;;80.00\n"
    "03/04/2025;BAD ROW;;10.00\n"
)


@pytest.fixture
def files(tmp_path):
    statement = tmp_path / "statement.csv"
    statement.write_text(STATEMENT_CSV)
    payments = tmp_path / "payments.json"
    payments.write_text(
        json.dumps([{"id": "p1", "amount": "500.00", "quote_number": "1042", "method": "INTERAC", "paid_at": "2025-03-01"}])
    )
    return statement, payments


def test_reconcile_dry_run(files):
    statement, payments = files

    result = CliRunner().invoke(
        main, ["reconcile", str(statement), "--payments", str(payments), "--dry-run", "--show-matches"]
    )

    assert result.exit_code == 0, result.output
    assert "Reconciliation Summary" in result.output
    assert "Skipped Statement Rows" in result.output
    assert "Dry run" in result.output


def test_reconcile_writes_report(files, tmp_path):
    statement, payments = files
    output = tmp_path / "report.xlsx"

    result = CliRunner().invoke(
        main, ["reconcile", str(statement), "-p", str(payments), "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_reconcile_writes_log_file(files, tmp_path):
    statement, payments = files
    log_file = tmp_path / "logs" / "recon.log"

    result = CliRunner().invoke(
        main,
        ["reconcile", str(statement), "-p", str(payments), "--dry-run", "--log-file", str(log_file)],
    )

    assert result.exit_code == 0, result.output
    assert "Starting reconciliation" in log_file.read_text()


def test_reconcile_counts_repeated_statement_once(files):
    statement, payments = files

    result = CliRunner().invoke(
        main, ["reconcile", str(statement), str(statement), "-p", str(payments), "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert "Skipped 3 duplicate transactions" in result.output


def test_reconcile_reports_bad_statement(tmp_path, files):
    _, payments = files
    statement = tmp_path / "broken.csv"
    statement.write_text("When;What\n2025-03-01;x\n")

    result = CliRunner().invoke(main, ["reconcile", str(statement), "-p", str(payments), "--dry-run"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_parse_statement_command(files):
    statement, _ = files

    result = CliRunner().invoke(main, ["parse-statement", str(statement)])

    assert result.exit_code == 0, result.output
    assert "Total transactions: 3" in result.output


def test_parse_payments_command(files):
    _, payments = files

    result = CliRunner().invoke(main, ["parse-payments", str(payments)])

    assert result.exit_code == 0, result.output
    assert "Total payments: 1" in result.output


def test_init_config(tmp_path):
    output = tmp_path / "config.yaml"

    result = CliRunner().invoke(main, ["init-config", "-o", str(output)])

    assert result.exit_code == 0
    assert output.exists()
