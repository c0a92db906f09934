"""
Command-line interface for the bank statement to payment reconciliation tool.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config
from .models.transaction import (
    BankTransaction,
    ReconciliationMatch,
    ReconciliationSummary,
    RowParseError,
)
from .parsers.dedup import merge_transactions
from .parsers.ledger_parser import PaymentLedgerParser
from .parsers.statement_parser import StatementParser
from .matching.engine import ReconciliationEngine
from .reports.excel_generator import CONFIDENCE_LABELS, ExcelReportGenerator
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

PREVIEW_ROWS = 20


@click.group()
@click.version_option(version=__version__)
def main():
    """Bank Statement to Payment Ledger Reconciliation Tool."""
    pass


@main.command()
@click.argument(
    "statement_files", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option(
    "-p",
    "--payments",
    "payments_file",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Payment ledger export (JSON or CSV)",
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("--log-file", type=click.Path(path_type=Path), help="Also write a debug log here")
@click.option("--show-matches", is_flag=True, help="Print the match table")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Reconcile and show summary without generating report"
)
def reconcile(
    statement_files: tuple[Path, ...],
    payments_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    log_file: Optional[Path],
    show_matches: bool,
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile bank statements against recorded payments.

    STATEMENT_FILES: One or more CSV statement exports or JSON feed dumps.
    Transactions repeated across files are only counted once.
    """
    try:
        recon_config = load_config(config)
        log_level = (
            logging.DEBUG
            if verbose
            else getattr(logging, recon_config.logging.level.upper(), logging.INFO)
        )
        setup_logging(log_level, log_file=log_file, log_format=recon_config.logging.format)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Parsing statements...", total=None)
            statement_parser = StatementParser(recon_config)
            transactions: list[BankTransaction] = []
            parse_errors: list[RowParseError] = []
            duplicate_count = 0
            for statement_file in statement_files:
                result = statement_parser.parse_file(statement_file)
                transactions, duplicates = merge_transactions(transactions, result.transactions)
                duplicate_count += len(duplicates)
                parse_errors.extend(result.errors)
            progress.update(task, completed=True)

            task = progress.add_task("Loading payments...", total=None)
            payments = PaymentLedgerParser(recon_config).parse_file(payments_file)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            engine = ReconciliationEngine(recon_config)
            matches = engine.match_transactions_with_payments(transactions, payments)
            summary = engine.generate_summary(matches)
            progress.update(task, completed=True)

        if duplicate_count:
            console.print(f"[yellow]Skipped {duplicate_count} duplicate transactions[/yellow]")
        if parse_errors:
            _display_parse_errors(parse_errors)

        _display_summary(summary)
        if show_matches:
            _display_matches(matches)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        if output is None:
            now = datetime.now()
            output = Path(
                recon_config.output.excel.filename_template.format(
                    date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
                )
            )

        report_path = ExcelReportGenerator(recon_config).generate_report(
            summary=summary,
            matches=matches,
            output_path=output,
            parse_errors=parse_errors,
            sources=[f.name for f in statement_files] + [payments_file.name],
        )

        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-statement")
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_statement(statement_file: Path, config: Optional[Path]):
    """
    Parse a bank statement and display its transactions.

    STATEMENT_FILE: CSV statement export or JSON feed dump
    """
    try:
        recon_config = load_config(config)
        result = StatementParser(recon_config).parse_file(statement_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Statement Transactions: {statement_file.name}")
    table.add_column("Date")
    table.add_column("Reference")
    table.add_column("Amount", justify="right")
    table.add_column("Description")

    for txn in result.transactions[:PREVIEW_ROWS]:
        table.add_row(
            str(txn.date),
            txn.reference_id or "-",
            f"${txn.amount:,.2f}",
            _truncate(txn.description),
        )

    console.print(table)

    if len(result.transactions) > PREVIEW_ROWS:
        console.print(f"\n... and {len(result.transactions) - PREVIEW_ROWS} more transactions")

    console.print(f"\nTotal transactions: {len(result.transactions)}")
    if result.has_errors:
        _display_parse_errors(result.errors)


@main.command("parse-payments")
@click.argument("payments_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_payments(payments_file: Path, config: Optional[Path]):
    """
    Parse a payment ledger export and display its payments.

    PAYMENTS_FILE: JSON records, JSON audit-trail payload or CSV
    """
    try:
        recon_config = load_config(config)
        payments = PaymentLedgerParser(recon_config).parse_file(payments_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Payments: {payments_file.name}")
    table.add_column("ID")
    table.add_column("Quote #")
    table.add_column("Method")
    table.add_column("Paid At")
    table.add_column("Amount", justify="right")

    for payment in payments[:PREVIEW_ROWS]:
        table.add_row(
            payment.id,
            payment.quote_number or "-",
            payment.method or "-",
            str(payment.paid_at) if payment.paid_at else "-",
            f"${payment.amount:,.2f}",
        )

    console.print(table)

    if len(payments) > PREVIEW_ROWS:
        console.print(f"\n... and {len(payments) - PREVIEW_ROWS} more payments")

    console.print(f"\nTotal payments: {len(payments)}")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(summary: ReconciliationSummary) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Transactions", str(summary.total_transactions))
    table.add_row("High Confidence", str(summary.matched.high))
    table.add_row("Medium Confidence", str(summary.matched.medium))
    table.add_row("Low Confidence", str(summary.matched.low))
    table.add_row("Unmatched", str(summary.unmatched))
    table.add_row("Match Rate", f"{summary.match_rate:.1f}%")
    table.add_row("Total Credits", f"${summary.total_credits:,.2f}")
    table.add_row("Matched Amount", f"${summary.matched_amount:,.2f}")
    table.add_row("Unmatched Amount", f"${summary.unmatched_amount:,.2f}")

    console.print(table)


def _display_matches(matches: list[ReconciliationMatch]) -> None:
    table = Table(title=f"Transaction Matches ({len(matches)})")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Matched To")
    table.add_column("Confidence")
    table.add_column("Reason")

    for match in matches:
        payment = match.payment
        table.add_row(
            str(match.transaction.date),
            _truncate(match.transaction.description),
            f"${match.transaction.amount:,.2f}",
            f"{payment.quote_number} (${payment.amount:,.2f})" if payment else "No match",
            CONFIDENCE_LABELS[match.match_confidence],
            match.match_reason,
        )

    console.print(table)


def _display_parse_errors(errors: list[RowParseError]) -> None:
    table = Table(title=f"Skipped Statement Rows ({len(errors)})", style="yellow")
    table.add_column("File")
    table.add_column("Row", justify="right")
    table.add_column("Field")
    table.add_column("Problem")

    for error in errors[:PREVIEW_ROWS]:
        table.add_row(error.source or "-", str(error.row_number), error.field, error.message)

    console.print(table)


def _truncate(text: str, width: int = 40) -> str:
    return text[:width] + "..." if len(text) > width else text


if __name__ == "__main__":
    main()
