# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
High-level services for transaction CRUD, backups and reporting.

This module sits between:
- the low-level database helpers in `db.py`, and
- user-facing layers such as the CLI.

Responsibilities
----------------
1) CRUD Operations
   - Record new transactions (validated before they reach the database).
   - Edit existing transactions using partial updates.
   - Delete transactions permanently.
   - List transactions, optionally restricted to a month.

2) Backups
   - Import a JSON/CSV backup, merging by id.
   - Export every transaction to a JSON backup.
   - Clear all transactions.

3) Reporting
   - Load a snapshot of the stored transactions.
   - Load the classification table selected by the configuration.
   - Compute the trend, period/cumulative statements and ratios.
   - Summarize transactions whose category is not classified.

Design notes
------------
- The database stores any category label. Classification is applied only
  when reports are built; unknown categories are excluded from statements
  and can be listed with ``unclassified_summary``.
- Reports are always computed from a fresh snapshot, so every call reflects
  the current state of the store.
"""

from datetime import date
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .classification import summarize_unclassified
from .config import AppConfig, load_classification_table
from .db import (
    DatabaseConfig,
    ImportStats,
)
from .db import (
    clear_transactions as _db_clear_transactions,
)
from .db import (
    delete_transaction as _db_delete_transaction,
)
from .db import (
    get_transaction_by_id as _db_get_transaction_by_id,
)
from .db import (
    import_transactions as _db_import_transactions,
)
from .db import (
    insert_transaction as _db_insert_transaction,
)
from .db import (
    load_transactions as _db_load_transactions,
)
from .db import (
    update_transaction as _db_update_transaction,
)
from .io import default_backup_name, read_transactions, write_transactions_json
from .periods import cumulative_upper_bound, validate_month
from .reporting import ReportBundle, compute_reports
from .transactions import (
    NewTransaction,
    Transaction,
    TransactionNotFoundError,
    TransactionUpdate,
    apply_update,
    create_transaction,
)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_db_config(app_config: AppConfig) -> DatabaseConfig:
    """Return the database configuration from the application config."""
    return app_config.database


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def record_transaction(app_config: AppConfig, data: NewTransaction) -> Transaction:
    """
    Validate and store a new transaction.

    Raises
    ------
    InvalidTransactionError
        If any field is invalid.
    """
    tx = create_transaction(data)
    return _db_insert_transaction(_get_db_config(app_config), tx)


def get_transaction(app_config: AppConfig, tx_id: str) -> Transaction:
    """
    Load one transaction.

    Raises
    ------
    TransactionNotFoundError
        If no transaction has this id.
    """
    tx = _db_get_transaction_by_id(_get_db_config(app_config), tx_id)
    if tx is None:
        raise TransactionNotFoundError(f"Transaction {tx_id!r} not found.")
    return tx


def edit_transaction(
    app_config: AppConfig,
    tx_id: str,
    update: TransactionUpdate,
) -> Transaction:
    """
    Apply a partial update to an existing transaction.

    The id and creation timestamp are preserved.

    Raises
    ------
    TransactionNotFoundError
        If no transaction has this id.
    InvalidTransactionError
        If the update is empty or an updated field is invalid.
    """
    current = get_transaction(app_config, tx_id)
    updated = apply_update(current, update)
    return _db_update_transaction(_get_db_config(app_config), updated)


def remove_transaction(app_config: AppConfig, tx_id: str) -> None:
    """
    Permanently delete a transaction.

    Raises
    ------
    TransactionNotFoundError
        If no transaction has this id.
    """
    _db_delete_transaction(_get_db_config(app_config), tx_id)


def list_transactions(
    app_config: AppConfig,
    month: Optional[str] = None,
) -> list[Transaction]:
    """
    List stored transactions ordered by date.

    When ``month`` ('YYYY-MM') is given, only that month's transactions are
    returned.
    """
    cfg = _get_db_config(app_config)
    if month is None:
        return _db_load_transactions(cfg)
    month = validate_month(month)
    return _db_load_transactions(
        cfg, start=f"{month}-01", end=cumulative_upper_bound(month)
    )


# ---------------------------------------------------------------------------
# Backups
# ---------------------------------------------------------------------------


def import_backup(
    app_config: AppConfig,
    path: Union[str, Path],
) -> ImportStats:
    """
    Merge a JSON/CSV backup into the store, skipping ids already present.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file holds no valid transaction.
    """
    transactions = read_transactions(path)
    return _db_import_transactions(_get_db_config(app_config), transactions)


def export_backup(
    app_config: AppConfig,
    path: Union[str, Path, None] = None,
    today: Optional[date] = None,
) -> Path:
    """
    Write every stored transaction to a JSON backup.

    When ``path`` is None, ``smartbook-backup-YYYY-MM-DD.json`` is written to
    the current directory. When ``path`` is a directory, the default name is
    used inside it.
    """
    if path is None:
        target = Path(default_backup_name(today))
    else:
        target = Path(path)
        if target.is_dir():
            target = target / default_backup_name(today)

    transactions = _db_load_transactions(_get_db_config(app_config))
    return write_transactions_json(transactions, target)


def clear_all_transactions(app_config: AppConfig) -> int:
    """Delete every stored transaction. Returns the number removed."""
    return _db_clear_transactions(_get_db_config(app_config))


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def build_reports(
    app_config: AppConfig,
    month: Optional[str] = None,
) -> ReportBundle:
    """
    Compute the full set of reports from the current store.

    Parameters
    ----------
    app_config:
        Application configuration (database and classification table).
    month:
        Reporting month 'YYYY-MM', or None for the whole history.
    """
    table = load_classification_table(app_config)
    transactions = _db_load_transactions(_get_db_config(app_config))
    return compute_reports(transactions, month=month, table=table)


def unclassified_summary(app_config: AppConfig) -> pd.DataFrame:
    """
    Summarize stored transactions whose category is not classified.

    Returns a DataFrame with columns ``category, count, total_amount``.
    """
    table = load_classification_table(app_config)
    transactions = _db_load_transactions(_get_db_config(app_config))
    return summarize_unclassified(transactions, table)
