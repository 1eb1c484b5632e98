"""Command-line interface for audit automation."""

import argparse
import dataclasses
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Sequence

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from audit_automation import __version__
from audit_automation.config import Config, ConfigError, load_config
from audit_automation.insights import (
    AnthropicInsightGenerator,
    APIKeyNotFoundError,
    EmptyResponseError,
    InsightGenerator,
    InsightRequestError,
    InvalidAPIKeyError,
)
from audit_automation.models.report import ProcessedData, SpendingLeader
from audit_automation.parsers import ParseError, RowError, TransactionCSVParser
from audit_automation.processing import process_transactions
from audit_automation.utils.decimal_utils import format_money
from audit_automation.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)

# Row errors and flagged rows printed before truncating
MAX_LISTED = 10


def _decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="audit-automation",
        description="Flag financial transactions for audit and summarize spend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -i transactions.csv
  %(prog)s -i transactions.csv --export-dir reports --xlsx reports/audit.xlsx
  %(prog)s -i transactions.csv --general-threshold 5000 --insights
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-i", "--input",
        type=Path,
        required=True,
        help="CSV file with transaction_id,date,amount,account,category,vendor,policy_code",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )

    # Output options
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Write CSV reports to this directory",
    )

    parser.add_argument(
        "--xlsx",
        type=Path,
        default=None,
        help="Write an Excel workbook to this path",
    )

    # Audit overrides
    audit_group = parser.add_argument_group("Audit Settings")
    audit_group.add_argument(
        "--general-threshold",
        type=_decimal_arg,
        default=None,
        help="Override the general high value threshold",
    )
    audit_group.add_argument(
        "--outlier-factor",
        type=_decimal_arg,
        default=None,
        help="Override the outlier standard deviation factor",
    )
    audit_group.add_argument(
        "--legacy-duplicates",
        action="store_true",
        help="Leave the first occurrence of a duplicated ID unflagged",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Strict mode: abort on the first malformed row instead of skipping",
    )

    parser.add_argument(
        "--insights",
        action="store_true",
        help="Request a narrative summary of flagged transactions",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path (default: from settings; empty string disables)",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line overrides to the audit settings.

    Args:
        config: Loaded configuration.
        args: Parsed arguments.

    Returns:
        The same Config with a replaced AuditConfig when overrides were given.
    """
    changes: dict[str, object] = {}
    if args.general_threshold is not None:
        changes["general_threshold"] = args.general_threshold
    if args.outlier_factor is not None:
        changes["outlier_std_dev_factor"] = args.outlier_factor
    if args.legacy_duplicates:
        changes["flag_first_duplicate"] = False

    if changes:
        config.audit = dataclasses.replace(config.audit, **changes)
        logger.info(f"Applied command-line overrides: {sorted(changes)}")
    return config


def display_row_errors(errors: list[RowError]) -> None:
    """Print skipped rows, truncated after MAX_LISTED."""
    if not errors:
        return
    console.print(f"\n[yellow]Skipped rows ({len(errors)}):[/yellow]")
    for error in errors[:MAX_LISTED]:
        console.print(f"  - {error}")
    if len(errors) > MAX_LISTED:
        console.print(f"  ... and {len(errors) - MAX_LISTED} more")


def _leader_table(title: str, leaders: list[SpendingLeader], symbol: str) -> Table:
    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Amount", justify="right")
    for leader in leaders:
        table.add_row(leader.name, format_money(leader.amount, symbol))
    return table


def display_report(data: ProcessedData, config: Config) -> None:
    """Print KPIs, spend leaders, monthly trend, and compliance buckets.

    Args:
        data: Processed audit results.
        config: Application configuration (currency display).
    """
    symbol = config.output.currency_symbol
    summary = data.audit_summary

    console.print("\n[bold]Audit Summary[/bold]")
    console.print(f"  Total transactions: {summary.total_transactions:,}")
    console.print(f"  Total amount: {format_money(summary.total_amount, symbol)}")
    console.print(f"  [red]Flagged for audit: {summary.flagged_for_audit_count:,}[/red]")
    console.print(f"  [yellow]Policy violations: {summary.policy_violations_count:,}[/yellow]")

    if summary.total_transactions == 0:
        return

    console.print(_leader_table("Top Categories", data.highest_spending_categories, symbol))
    console.print(_leader_table("Top Vendors", data.highest_spending_vendors, symbol))
    console.print(_leader_table("Top Accounts", data.highest_spending_accounts, symbol))

    trend = Table(title="Monthly Spend")
    trend.add_column("Month")
    trend.add_column("Amount", justify="right")
    for point in data.spend_trend:
        trend.add_row(point.date, format_money(point.amount, symbol))
    console.print(trend)

    compliance = Table(title="Policy Compliance")
    compliance.add_column("Bucket")
    compliance.add_column("Transactions", justify="right")
    for bucket in data.policy_compliance:
        compliance.add_row(bucket.name, str(bucket.value))
    console.print(compliance)

    if data.flagged_transactions:
        flagged = Table(title=f"Flagged Transactions (first {MAX_LISTED})")
        flagged.add_column("ID")
        flagged.add_column("Date")
        flagged.add_column("Amount", justify="right")
        flagged.add_column("Category")
        flagged.add_column("Reasons")
        for txn in data.flagged_transactions[:MAX_LISTED]:
            flagged.add_row(
                txn.transaction_id,
                txn.date,
                format_money(txn.amount, symbol),
                txn.category,
                "; ".join(txn.risk_reasons),
            )
        console.print(flagged)


def run_insights(data: ProcessedData, generator: InsightGenerator) -> bool:
    """Request and print narrative insights.

    Args:
        data: Processed audit results.
        generator: Insight capability.

    Returns:
        True if insights were printed, False on a reported failure.
    """
    try:
        with console.status("[bold green]Generating insights..."):
            text = generator.summarize(data.flagged_transactions)
    except APIKeyNotFoundError as e:
        console.print(f"[yellow]AI insights unavailable: {e}. Set the key in your environment or .env file.[/yellow]")
        return False
    except InvalidAPIKeyError as e:
        console.print(f"[red]AI insights failed: {e}[/red]")
        return False
    except EmptyResponseError:
        console.print("[yellow]AI insights returned an empty response. Try again later.[/yellow]")
        return False
    except InsightRequestError as e:
        console.print(f"[red]AI insights request failed: {e}[/red]")
        return False

    console.print("\n[bold]AI Insights[/bold]")
    console.print(text)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = get_log_level(args.verbose)
    setup_logging(level=log_level, log_file="", console_output=args.verbose > 0)

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
    except (ConfigError, FileNotFoundError, yaml.YAMLError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 1

    # Settings decide the level unless -v was given
    setup_logging(
        level=log_level if args.verbose else config.logging.level,
        log_file=args.log_file if args.log_file is not None else config.logging.file,
        console_output=args.verbose > 0,
    )
    config = apply_overrides(config, args)

    console.print(f"[bold]Audit Automation v{__version__}[/bold]\n")
    console.print(f"Input file: {args.input}")

    try:
        result = TransactionCSVParser(strict=args.strict).parse(args.input)
    except (ParseError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    display_row_errors(result.errors)

    data = process_transactions(result.transactions, config.audit)
    display_report(data, config)

    if args.export_dir is not None:
        from audit_automation.output import CSVExporter

        files = CSVExporter(config).export(args.export_dir, data)
        console.print(f"\n[green]Wrote {len(files)} CSV files to {args.export_dir}[/green]")

    if args.xlsx is not None:
        from audit_automation.output import ExcelWriter

        ExcelWriter(config).write(args.xlsx, data)
        console.print(f"[green]Wrote Excel workbook to {args.xlsx}[/green]")

    if args.insights:
        run_insights(data, AnthropicInsightGenerator(config.insights))

    return 0


if __name__ == "__main__":
    sys.exit(main())
