# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for SmartBook.

This module reads and writes transaction backups.

Supported input formats
-----------------------

1) JSON backup
   -----------
   A JSON array of transaction objects, as written by
   ``write_transactions_json``:

       [
         {"id": "...", "date": "2024-01-05", "description": "Sale",
          "category": "Sales Revenue", "amount": 1000, "timestamp": "..."},
         ...
       ]

2) CSV file
   --------
       date, description, category, amount[, id, timestamp]

   Column names are case-insensitive. ``label`` is accepted as an alias for
   ``description``.

Validation
----------
A record is kept only when it has a date, a description, a category and a
numeric amount, and when it passes the Transaction validation (ISO date,
amount > 0). Other records are skipped and logged. Missing ids and
timestamps are generated.

If the payload is not a list of records, or if no valid record remains,
a clear ValueError is raised.
"""

import json
import os
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Union

import pandas as pd

from .logging_setup import get_logger
from .transactions import (
    InvalidTransactionError,
    NewTransaction,
    Transaction,
    create_transaction,
)

logger = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

REQUIRED_FIELDS = ("date", "description", "category", "amount")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return not str(value).strip()


def _is_numeric(value: Any) -> bool:
    # JSON true/false would otherwise pass as 1.0/0.0.
    if isinstance(value, bool):
        return False
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return not pd.isna(float(value))


def _read_json_records(path: Path) -> list[Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse JSON file {path}: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError(
            "Invalid data format: expected an array of transactions."
        )
    return payload


def _read_csv_records(path: Path) -> list[Any]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "description" not in df.columns and "label" in df.columns:
        df = df.rename(columns={"label": "description"})

    missing = [c for c in REQUIRED_FIELDS if c not in df.columns]
    if missing:
        raise ValueError(
            f"CSV file {path} is missing required column(s): {', '.join(missing)}"
        )
    return df.to_dict("records")


def _to_transaction(record: Any) -> Transaction | None:
    """Build a Transaction from a raw record, or None if it is not valid."""
    if not isinstance(record, dict):
        return None
    if any(_is_blank(record.get(name)) for name in REQUIRED_FIELDS[:3]):
        return None
    if not _is_numeric(record.get("amount")):
        return None

    raw_id = record.get("id")
    raw_timestamp = record.get("timestamp")
    try:
        return create_transaction(
            NewTransaction(
                date=record["date"],
                description=record["description"],
                category=record["category"],
                amount=record["amount"],
            ),
            transaction_id=None if _is_blank(raw_id) else str(raw_id).strip(),
            timestamp=None if _is_blank(raw_timestamp) else str(raw_timestamp),
        )
    except InvalidTransactionError as exc:
        logger.warning("Skipping imported record %r: %s", raw_id, exc)
        return None


def read_transactions(path: PathLike) -> list[Transaction]:
    """
    Read transactions from a JSON backup or a CSV file.

    Parameters
    ----------
    path:
        Path to a ``.json`` or ``.csv`` file.

    Returns
    -------
    list[Transaction]
        Valid transactions, in file order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the format is unsupported, the payload is not a list of records,
        or no valid transaction is found.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Backup file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        records = _read_json_records(path)
    elif suffix == ".csv":
        records = _read_csv_records(path)
    else:
        raise ValueError(
            f"Unsupported file type {suffix!r}: expected a .json or .csv file."
        )

    transactions: list[Transaction] = []
    for record in records:
        tx = _to_transaction(record)
        if tx is not None:
            transactions.append(tx)

    skipped = len(records) - len(transactions)
    if skipped:
        logger.info("%d invalid record(s) ignored in %s.", skipped, path)

    if not transactions:
        raise ValueError(f"No valid transactions found in {path}.")
    return transactions


def write_transactions_json(
    transactions: list[Transaction],
    path: PathLike,
) -> Path:
    """Write transactions as a pretty-printed JSON array. Returns the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [asdict(tx) for tx in transactions]
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    logger.info("Exported %d transaction(s) to %s.", len(payload), path)
    return path


def default_backup_name(today: date | None = None) -> str:
    """Return the default backup file name 'smartbook-backup-YYYY-MM-DD.json'."""
    today = today or date.today()
    return f"smartbook-backup-{today.isoformat()}.json"
