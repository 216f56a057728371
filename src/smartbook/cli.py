# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SmartBook.

This module wires together the main building blocks of SmartBook:

- application configuration (database, classification table, display),
- transaction storage (SQLite) and JSON/CSV backups,
- statement aggregation for a reporting month,
- health ratios and the monthly trend,
- view helpers (tabular rendering and CSV export).

The CLI is intentionally thin: it does not implement accounting logic
itself. It orchestrates the underlying modules based on command-line
arguments and configuration files.


Subcommands
-----------

- ``add``:          record a transaction.
- ``edit ID``:      change one or more fields of a transaction.
- ``delete ID``:    permanently delete a transaction.
- ``list``:         list transactions (newest first), optionally for a month.
- ``categories``:   show the active classification table.
- ``report``:       render the statements for a month
                    (SOPL for the month; SOFP and SOCF cumulative).
- ``dashboard``:    render the health ratios and the monthly trend.
- ``import PATH``:  merge a JSON/CSV backup into the database.
- ``export [PATH]``: write every transaction to a JSON backup.
- ``clear --yes``:  delete every transaction.
- ``unclassified``: list categories excluded from the statements.


Reporting month
---------------

``--month YYYY-MM`` selects the reporting month; it defaults to the current
calendar month. ``report --all-time`` aggregates the whole history instead.

- The statement of profit or loss covers the month only.
- The statement of financial position and the statement of cash flows are
  cumulative up to the end of the month.
- Ratios are computed from the cumulative figures.


Configuration
-------------

By default, the CLI reads ``smartbook_config.toml`` from the current
working directory (built-in defaults apply when it is missing). Use
``--config PATH`` to point to another file, and ``--log-level`` to override
the logging level.


Output
------

Depending on the display mode (``[display].mode`` or ``--display-mode``):

- ``table``: statements are printed as text tables,
- ``csv``:   statements are written as CSV files to ``--output-dir``
             (``data/output`` by default),
- ``both``:  both of the above.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import AppConfig, load_app_config, load_classification_table
from .db import has_transactions, init_database
from .logging_setup import configure_logging, get_logger, resolve_log_level
from .periods import current_month, format_month_label, validate_month
from .reporting import ReportBundle
from .transactions import NewTransaction, TransactionUpdate
from .transactions_service import (
    build_reports,
    clear_all_transactions,
    edit_transaction,
    export_backup,
    import_backup,
    list_transactions,
    record_transaction,
    remove_transaction,
    unclassified_summary,
)
from .views import (
    format_currency,
    ratios_to_dataframe,
    socf_to_dataframe,
    sofp_to_dataframe,
    sopl_to_dataframe,
    transactions_to_dataframe,
    trend_to_dataframe,
)

logger = get_logger(__name__)

STATEMENTS = ("sopl", "sofp", "socf")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="smartbook",
        description=(
            "SmartBook - Cash-basis bookkeeping & financial statements for "
            "small businesses. Records categorized cash transactions and "
            "derives the statement of profit or loss, the statement of "
            "financial position, the statement of cash flows and health ratios."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smartbook and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'smartbook_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Logging level (DEBUG, INFO, WARNING, ...). Overrides the config.",
    )

    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="Operation to run (e.g. 'add', 'report', 'dashboard').",
    )

    # ------------------------------------------------------------------
    # add
    # ------------------------------------------------------------------
    add = subparsers.add_parser("add", help="Record a new transaction.")
    add.add_argument(
        "--date",
        default=None,
        help="Transaction date (YYYY-MM-DD). Defaults to today.",
    )
    add.add_argument("--description", required=True, help="Free-text label.")
    add.add_argument(
        "--category",
        required=True,
        help="Category key (see 'smartbook categories').",
    )
    add.add_argument(
        "--amount",
        required=True,
        help="Positive amount of the cash movement.",
    )

    # ------------------------------------------------------------------
    # edit
    # ------------------------------------------------------------------
    edit = subparsers.add_parser(
        "edit", help="Change one or more fields of an existing transaction."
    )
    edit.add_argument("transaction_id", help="Id of the transaction to edit.")
    edit.add_argument("--date", help="New date (YYYY-MM-DD).")
    edit.add_argument("--description", help="New description.")
    edit.add_argument("--category", help="New category.")
    edit.add_argument("--amount", help="New positive amount.")

    # ------------------------------------------------------------------
    # delete
    # ------------------------------------------------------------------
    delete = subparsers.add_parser("delete", help="Permanently delete a transaction.")
    delete.add_argument("transaction_id", help="Id of the transaction to delete.")

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------
    list_parser = subparsers.add_parser(
        "list", help="List transactions (newest first)."
    )
    list_parser.add_argument(
        "--month",
        help="Only list transactions of this month (YYYY-MM).",
    )

    # ------------------------------------------------------------------
    # categories
    # ------------------------------------------------------------------
    subparsers.add_parser("categories", help="Show the classification table.")

    # ------------------------------------------------------------------
    # report
    # ------------------------------------------------------------------
    report = subparsers.add_parser(
        "report", help="Render the financial statements for a month."
    )
    report.add_argument(
        "--month",
        help="Reporting month (YYYY-MM). Defaults to the current month.",
    )
    report.add_argument(
        "--all-time",
        dest="all_time",
        action="store_true",
        help="Aggregate the whole history instead of a single month.",
    )
    report.add_argument(
        "--statement",
        choices=[*STATEMENTS, "all"],
        default="all",
        help=(
            "Statement to render: 'sopl' (profit or loss), 'sofp' (financial "
            "position), 'socf' (cash flows) or 'all'."
        ),
    )
    report.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    report.add_argument(
        "--output-dir",
        dest="output_dir",
        help=(
            "Output directory where CSV files will be written when display "
            "mode includes 'csv'. If omitted, 'data/output' is used."
        ),
    )

    # ------------------------------------------------------------------
    # dashboard
    # ------------------------------------------------------------------
    dashboard = subparsers.add_parser(
        "dashboard", help="Render the health ratios and the monthly trend."
    )
    dashboard.add_argument(
        "--month",
        help="Reporting month (YYYY-MM). Defaults to the current month.",
    )

    # ------------------------------------------------------------------
    # import / export / clear
    # ------------------------------------------------------------------
    import_parser = subparsers.add_parser(
        "import", help="Merge a JSON or CSV backup into the database."
    )
    import_parser.add_argument("path", help="Path to the .json or .csv file.")

    export = subparsers.add_parser(
        "export", help="Write every transaction to a JSON backup."
    )
    export.add_argument(
        "path",
        nargs="?",
        default=None,
        help=(
            "Target file or directory. Defaults to "
            "'smartbook-backup-YYYY-MM-DD.json' in the current directory."
        ),
    )

    clear = subparsers.add_parser("clear", help="Delete every transaction.")
    clear.add_argument(
        "--yes",
        action="store_true",
        help="Confirm the deletion (required).",
    )

    # ------------------------------------------------------------------
    # unclassified
    # ------------------------------------------------------------------
    subparsers.add_parser(
        "unclassified",
        help="List categories excluded from the statements.",
    )

    return ap


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _display_amounts(df: pd.DataFrame, currency: str) -> pd.DataFrame:
    """Return a copy of a statement frame with formatted amounts."""
    out = df.copy()
    out["amount"] = [
        "" if row_type == "header" else format_currency(amount, currency)
        for row_type, amount in zip(out["type"], out["amount"])
    ]
    return out[["name", "amount"]]


def _statement_frames(
    bundle: ReportBundle, which: str
) -> list[tuple[str, str, pd.DataFrame]]:
    """Return (key, title, frame) for each statement to render."""
    label = (
        format_month_label(bundle.month) if bundle.month else "All transactions"
    )
    period_report = bundle.period_report or bundle.cumulative_report
    frames = {
        "sopl": (
            f"Statement of Profit or Loss - For the Month of {label}"
            if bundle.month
            else "Statement of Profit or Loss - All transactions",
            sopl_to_dataframe(period_report),
        ),
        "sofp": (
            f"Statement of Financial Position - As of {label}",
            sofp_to_dataframe(bundle.cumulative_report),
        ),
        "socf": (
            f"Statement of Cash Flows - For the Period Ending {label}",
            socf_to_dataframe(bundle.cumulative_report),
        ),
    }
    keys = STATEMENTS if which == "all" else (which,)
    return [(key, *frames[key]) for key in keys]


def _balance_status(bundle: ReportBundle, currency: str) -> str:
    report = bundle.cumulative_report
    status = "Balanced" if report.is_balanced() else "UNBALANCED!"
    diff = format_currency(report.balance_difference, currency)
    return f"Accounting Equation Status: {status} (Difference: {diff})"


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_add(args: argparse.Namespace, config: AppConfig) -> None:
    tx = record_transaction(
        config,
        NewTransaction(
            date=args.date or datetime.today().date().isoformat(),
            description=args.description,
            category=args.category,
            amount=args.amount,
        ),
    )
    if tx.category not in load_classification_table(config):
        print(
            f"Warning: category {tx.category!r} is not classified; "
            "it will be excluded from the statements."
        )
    print("Transaction recorded:")
    print(f"  id:          {tx.id}")
    print(f"  date:        {tx.date}")
    print(f"  description: {tx.description}")
    print(f"  category:    {tx.category}")
    print(f"  amount:      {format_currency(tx.amount, config.currency)}")


def _handle_edit(args: argparse.Namespace, config: AppConfig) -> None:
    tx = edit_transaction(
        config,
        args.transaction_id,
        TransactionUpdate(
            date=args.date,
            description=args.description,
            category=args.category,
            amount=args.amount,
        ),
    )
    print("Transaction updated:")
    print(f"  id:          {tx.id}")
    print(f"  date:        {tx.date}")
    print(f"  description: {tx.description}")
    print(f"  category:    {tx.category}")
    print(f"  amount:      {format_currency(tx.amount, config.currency)}")


def _handle_delete(args: argparse.Namespace, config: AppConfig) -> None:
    remove_transaction(config, args.transaction_id)
    print(f"Transaction {args.transaction_id} deleted.")


def _handle_list(args: argparse.Namespace, config: AppConfig) -> None:
    transactions = list_transactions(config, month=args.month)
    if not transactions:
        print("No transactions recorded yet.")
        return

    df = transactions_to_dataframe(transactions)
    df_display = df.drop(columns=["timestamp"]).copy()
    df_display["amount"] = [format_currency(a, config.currency) for a in df["amount"]]
    print(df_display.to_string(index=False))
    print()
    print(f"Total transactions: {len(df)}")


def _handle_categories(args: argparse.Namespace, config: AppConfig) -> None:
    table = load_classification_table(config)
    print(table.to_dataframe().to_string(index=False))


def _handle_report(args: argparse.Namespace, config: AppConfig) -> None:
    month: Optional[str] = None if args.all_time else (args.month or current_month())
    bundle = build_reports(config, month)

    if not bundle.has_data:
        label = format_month_label(bundle.month) if bundle.month else "any period"
        print(f"No transactions recorded for {label}.")
        return

    frames = _statement_frames(bundle, args.statement)
    display_mode = args.display_mode or config.display_mode

    if display_mode in {"table", "both"}:
        for key, title, df in frames:
            print()
            print(f"=== {title} ===")
            print(_display_amounts(df, config.currency).to_string(index=False))
            if key == "sofp":
                print(_balance_status(bundle, config.currency))

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        output_dir.mkdir(parents=True, exist_ok=True)
        suffix = bundle.month or "all"
        for key, _, df in frames:
            path = output_dir / f"{key}_{suffix}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _handle_dashboard(args: argparse.Namespace, config: AppConfig) -> None:
    month = args.month or current_month()
    bundle = build_reports(config, month)

    label = format_month_label(month)
    print(f"=== Key Business Health Metrics (Cumulative to {label}) ===")
    ratios_df = ratios_to_dataframe(bundle.ratios, decimals=config.ratio_decimals)
    print(ratios_df[["label", "display", "rating", "notes"]].to_string(index=False))

    print()
    print("=== Monthly Performance Trend ===")
    if bundle.trend.is_empty:
        print("No profit-or-loss transactions recorded yet.")
    else:
        print(trend_to_dataframe(bundle.trend).to_string(index=False))


def _handle_import(args: argparse.Namespace, config: AppConfig) -> None:
    print(f"Importing transactions from {args.path}...")
    stats = import_backup(config, args.path)
    print(
        f"Imported {stats.rows_inserted} transaction(s), "
        f"{stats.duplicates_skipped} already present."
    )


def _handle_export(args: argparse.Namespace, config: AppConfig) -> None:
    path = export_backup(config, args.path)
    print(f"Backup written to {path}")


def _handle_clear(args: argparse.Namespace, config: AppConfig) -> None:
    if not args.yes:
        print("Data clearance cancelled (pass --yes to delete ALL transactions).")
        return
    removed = clear_all_transactions(config)
    print(f"All data cleared ({removed} transaction(s) deleted).")


def _handle_unclassified(args: argparse.Namespace, config: AppConfig) -> None:
    summary = unclassified_summary(config)
    if summary.empty:
        print("Every transaction has a classified category.")
        return
    print("Unclassified categories (excluded from the statements):")
    print(summary.to_string(index=False))


_HANDLERS = {
    "add": _handle_add,
    "edit": _handle_edit,
    "delete": _handle_delete,
    "list": _handle_list,
    "categories": _handle_categories,
    "report": _handle_report,
    "dashboard": _handle_dashboard,
    "import": _handle_import,
    "export": _handle_export,
    "clear": _handle_clear,
    "unclassified": _handle_unclassified,
}


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the SmartBook CLI.

    This function parses command-line arguments, loads the application
    configuration, configures logging, initializes the database and runs
    the requested subcommand. Input errors (invalid transaction data,
    unknown ids, malformed months or backup files) are reported through
    ``parser.error`` and exit with status 2.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"smartbook version {__version__}")
        return

    if args.command is None:
        parser.print_help()
        return

    # 1) Load application configuration
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 2) Logging; an unknown level name is a usage error
    try:
        log_level = resolve_log_level(args.log_level or config.log_level)
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(log_level)

    # 3) Initialize the database (create file and schema if needed)
    init_database(config.database)
    if args.command in {"report", "dashboard"} and not has_transactions(
        config.database
    ):
        print(
            "Warning: database is empty - use 'add' or 'import' to record "
            "transactions."
        )

    # 4) Validate month arguments up front
    month_arg = getattr(args, "month", None)
    if month_arg:
        try:
            validate_month(month_arg)
        except ValueError as exc:
            parser.error(str(exc))

    # 5) Run the subcommand
    handler = _HANDLERS[args.command]
    try:
        handler(args, config)
    except (ValueError, LookupError, FileNotFoundError) as exc:
        logger.debug("Command %r failed: %s", args.command, exc)
        parser.error(str(exc))


if __name__ == "__main__":
    main(sys.argv[1:])
