# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for SmartBook.

This module provides the low-level accessors used to persist the
transaction list in a local SQLite file. It is responsible for:

- Initializing the database schema.
- CRUD operations on individual transactions.
- Loading the transaction list (optionally bounded by dates).
- Merging imported transactions while skipping ids already stored.
- Clearing all transactions.

The derivation engine never talks to the database: higher layers load a
snapshot of transactions with ``load_transactions`` and hand it over to
the engine.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

transactions
   One row per recorded cash transaction.

   Columns:
   - id            TEXT    PRIMARY KEY   -- stable identifier
   - date          TEXT    NOT NULL      -- ISO date "YYYY-MM-DD"
   - description   TEXT    NOT NULL
   - category      TEXT    NOT NULL
   - amount_cents  INTEGER NOT NULL      -- positive integer amount in cents
   - timestamp     TEXT    NOT NULL      -- creation time (ISO, UTC)
   - updated_at    TEXT                  -- last modification (ISO, UTC)
   - seq           INTEGER NOT NULL      -- insertion order

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- All timestamps are stored as ISO-8601 text (UTC).
- Amounts are stored as integer cents and converted back to floats.
- The database file is portable across platforms.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .logging_setup import get_logger
from .transactions import Transaction, TransactionNotFoundError

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for SmartBook.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class ImportStats:
    """
    Summary of a merge of transactions into the database.

    Attributes
    ----------
    rows_inserted:
        Number of new transactions stored.
    duplicates_skipped:
        Number of transactions skipped because their id already exists.
    """

    rows_inserted: int
    duplicates_skipped: int


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = "id, date, description, category, amount_cents, timestamp"


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id            TEXT    PRIMARY KEY,
            date          TEXT    NOT NULL,  -- ISO date 'YYYY-MM-DD'
            description   TEXT    NOT NULL,
            category      TEXT    NOT NULL,
            amount_cents  INTEGER NOT NULL,
            timestamp     TEXT    NOT NULL,
            updated_at    TEXT,
            seq           INTEGER NOT NULL
        );
        """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_transactions_date
            ON transactions(date);
        """
    )

    conn.commit()


def _to_cents(amount: float) -> int:
    cents = int(round(float(amount) * 100))
    if cents < 1:
        raise ValueError(
            f"Amount {amount!r} is below one cent and cannot be stored."
        )
    return cents


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _row_to_transaction(row: tuple) -> Transaction:
    tx_id, tx_date, description, category, amount_cents, timestamp = row
    return Transaction(
        id=str(tx_id),
        date=str(tx_date),
        description=description,
        category=category,
        amount=amount_cents / 100.0,
        timestamp=timestamp,
    )


def _next_seq(conn: sqlite3.Connection) -> int:
    cur = conn.execute("SELECT COALESCE(MAX(seq), 0) + 1 FROM transactions;")
    return int(cur.fetchone()[0])


def _insert(conn: sqlite3.Connection, tx: Transaction, seq: int) -> None:
    conn.execute(
        """
        INSERT INTO transactions (
            id, date, description, category, amount_cents, timestamp,
            updated_at, seq
        )
        VALUES (?, ?, ?, ?, ?, ?, NULL, ?);
        """,
        (
            tx.id,
            tx.date,
            tx.description,
            tx.category,
            _to_cents(tx.amount),
            tx.timestamp,
            seq,
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if missing.
    - Creates the ``transactions`` table and its index.
    - Idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def get_transaction_by_id(cfg: DatabaseConfig, tx_id: str) -> Transaction | None:
    """Load a single transaction by id, or None if not found."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM transactions WHERE id = ?;",
            (tx_id,),
        )
        row = cur.fetchone()
    finally:
        conn.close()

    return None if row is None else _row_to_transaction(row)


def insert_transaction(cfg: DatabaseConfig, tx: Transaction) -> Transaction:
    """
    Insert a new transaction.

    Raises
    ------
    ValueError
        If a transaction with the same id already exists, or if the
        amount rounds below one cent.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        try:
            _insert(conn, tx, _next_seq(conn))
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"Transaction id {tx.id!r} already exists.") from exc
        conn.commit()
    finally:
        conn.close()

    logger.info("Recorded transaction %s (%s, %.2f).", tx.id, tx.category, tx.amount)
    return tx


def update_transaction(cfg: DatabaseConfig, tx: Transaction) -> Transaction:
    """
    Replace the stored fields of an existing transaction.

    ``id`` and ``timestamp`` are never changed; ``updated_at`` is refreshed.

    Raises
    ------
    TransactionNotFoundError
        If no transaction has this id.
    ValueError
        If the amount rounds below one cent.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE transactions
               SET date         = ?,
                   description  = ?,
                   category     = ?,
                   amount_cents = ?,
                   updated_at   = ?
             WHERE id = ?;
            """,
            (
                tx.date,
                tx.description,
                tx.category,
                _to_cents(tx.amount),
                _now_utc_iso(),
                tx.id,
            ),
        )
        if cur.rowcount == 0:
            raise TransactionNotFoundError(f"Transaction {tx.id!r} not found.")
        conn.commit()
    finally:
        conn.close()

    result = get_transaction_by_id(cfg, tx.id)
    if result is None:
        msg = f"Transaction {tx.id!r} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_transaction(cfg: DatabaseConfig, tx_id: str) -> None:
    """
    Permanently delete a transaction.

    Raises
    ------
    TransactionNotFoundError
        If no transaction has this id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM transactions WHERE id = ?;", (tx_id,))
        if cur.rowcount == 0:
            raise TransactionNotFoundError(f"Transaction {tx_id!r} not found.")
        conn.commit()
    finally:
        conn.close()

    logger.info("Deleted transaction %s.", tx_id)


def load_transactions(
    cfg: DatabaseConfig,
    start: str | None = None,
    end: str | None = None,
) -> list[Transaction]:
    """
    Load transactions ordered by date, then insertion order.

    Parameters
    ----------
    cfg:
        Database configuration.
    start, end:
        Optional inclusive ISO date bounds ('YYYY-MM-DD').

    Returns
    -------
    list[Transaction]
        A new list (snapshot) on every call. Empty when nothing matches.
    """
    init_database(cfg)

    clauses: list[str] = []
    params: list[object] = []
    if start is not None:
        clauses.append("date >= ?")
        params.append(start)
    if end is not None:
        clauses.append("date <= ?")
        params.append(end)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            SELECT {_SELECT_COLUMNS}
              FROM transactions
              {where}
             ORDER BY date, seq;
            """,
            params,
        )
        rows = cur.fetchall()
    finally:
        conn.close()

    return [_row_to_transaction(r) for r in rows]


def count_transactions(cfg: DatabaseConfig) -> int:
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("SELECT COUNT(*) FROM transactions;")
        return int(cur.fetchone()[0])
    finally:
        conn.close()


def has_transactions(cfg: DatabaseConfig) -> bool:
    """
    Return True if the database contains at least one transaction.

    Useful to warn the user when a report is requested on an empty store.
    """
    return count_transactions(cfg) > 0


def clear_transactions(cfg: DatabaseConfig) -> int:
    """Delete every transaction. Returns the number of rows removed."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM transactions;")
        removed = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    logger.info("Cleared %d transaction(s).", removed)
    return removed


def import_transactions(
    cfg: DatabaseConfig,
    transactions: Iterable[Transaction],
) -> ImportStats:
    """
    Merge transactions into the database.

    Transactions whose id is already stored (or repeated within the batch)
    are skipped. All inserts happen in a single database transaction.
    """
    init_database(cfg)

    inserted = 0
    skipped = 0

    conn = _connect(cfg)
    try:
        seq = _next_seq(conn)
        for tx in transactions:
            cur = conn.execute("SELECT 1 FROM transactions WHERE id = ?;", (tx.id,))
            if cur.fetchone() is not None:
                skipped += 1
                continue
            _insert(conn, tx, seq)
            seq += 1
            inserted += 1
        conn.commit()
    finally:
        conn.close()

    logger.info(
        "Imported %d transaction(s), skipped %d already stored.", inserted, skipped
    )
    return ImportStats(rows_inserted=inserted, duplicates_skipped=skipped)
