# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Transaction model and caller-side validation.

A Transaction is a dated cash movement tagged with a category. It carries
no sign: the direction of the movement comes entirely from the category's
classification (see classification.py).

Validation happens here, before a record reaches the derivation engine:

- the description must be non-empty after trimming,
- the category must be non-empty (unknown categories are accepted and
  silently excluded later by the aggregator),
- the date must be an ISO 'YYYY-MM-DD' calendar date,
- the amount must be a finite number of at least one cent (0.01).

Records are immutable. Updates produce a new Transaction with the same
``id`` and ``timestamp``.
"""

import math
import secrets
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Any, Optional

import pandas as pd

# Smallest amount the store can represent (one cent).
MIN_AMOUNT = 0.01


class InvalidTransactionError(ValueError):
    """Raised when user-supplied transaction data fails validation."""


class TransactionNotFoundError(LookupError):
    """Raised when an operation targets a transaction id that does not exist."""


@dataclass(frozen=True)
class Transaction:
    """
    A recorded cash transaction.

    Attributes
    ----------
    id:
        Unique identifier assigned at creation, stable for the record's
        lifetime.
    date:
        ISO date string 'YYYY-MM-DD'. Lexicographic order equals
        chronological order.
    description:
        Free-text label (non-empty, trimmed).
    category:
        Category key looked up in the classification table.
    amount:
        Positive magnitude of the cash movement.
    timestamp:
        Creation time (ISO-8601, UTC). Informational only.
    """

    id: str
    date: str
    description: str
    category: str
    amount: float
    timestamp: str


@dataclass(frozen=True)
class NewTransaction:
    """Data supplied by the user to record a transaction."""

    date: Any
    description: str
    category: str
    amount: Any


@dataclass(frozen=True)
class TransactionUpdate:
    """
    Fields that can be changed on an existing transaction.

    Each attribute is optional. Only non-None values are applied.
    """

    date: Any = None
    description: Optional[str] = None
    category: Optional[str] = None
    amount: Any = None


def generate_id() -> str:
    """Return a new identifier: millisecond clock followed by a random suffix."""
    return f"{int(time.time() * 1000)}{secrets.token_hex(5)[:9]}"


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def normalize_date(value: Any) -> str:
    """Return an ISO 'YYYY-MM-DD' string for a date-like value.

    Raises:
        InvalidTransactionError: if the value is not a valid calendar date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip() if value is not None else ""
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError as exc:
        raise InvalidTransactionError(
            f"Invalid date {value!r}, expected YYYY-MM-DD."
        ) from exc


def normalize_amount(value: Any) -> float:
    """Return the amount as a float.

    Amounts are stored in whole cents, so anything that rounds below one
    cent is rejected along with zero and negative values.

    Raises:
        InvalidTransactionError: if the amount is not a finite number of at
            least MIN_AMOUNT.
    """
    if isinstance(value, bool):
        raise InvalidTransactionError(f"Invalid amount {value!r}.")
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidTransactionError(f"Invalid amount {value!r}.") from exc
    if not math.isfinite(amount) or round(amount * 100) < 1:
        raise InvalidTransactionError(
            f"Invalid amount {value!r}, expected a number of at least "
            f"{MIN_AMOUNT:.2f}."
        )
    return amount


def _normalize_description(value: Any) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidTransactionError("Description cannot be empty.")
    return text


def _normalize_category(value: Any) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidTransactionError("Category cannot be empty.")
    return text


def validate_new_transaction(data: NewTransaction) -> NewTransaction:
    """Return ``data`` with every field normalized.

    The date becomes an ISO string, text fields are trimmed and the amount
    is a float.

    Raises:
        InvalidTransactionError: on the first invalid field.
    """
    return NewTransaction(
        date=normalize_date(data.date),
        description=_normalize_description(data.description),
        category=_normalize_category(data.category),
        amount=normalize_amount(data.amount),
    )


def create_transaction(
    data: NewTransaction,
    *,
    transaction_id: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> Transaction:
    """Validate user input and build a new Transaction.

    Args:
        data: User-supplied fields.
        transaction_id: Optional explicit id (e.g. when restoring a backup).
            A new id is generated when omitted.
        timestamp: Optional explicit creation timestamp.

    Raises:
        InvalidTransactionError: if any field is invalid.
    """
    valid = validate_new_transaction(data)
    return Transaction(
        id=transaction_id or generate_id(),
        date=valid.date,
        description=valid.description,
        category=valid.category,
        amount=valid.amount,
        timestamp=timestamp or _now_utc_iso(),
    )


def apply_update(transaction: Transaction, update: TransactionUpdate) -> Transaction:
    """Return a copy of ``transaction`` with the non-None fields of ``update``.

    Raises:
        InvalidTransactionError: if no field is provided or an updated field
            is invalid.
    """
    changes: dict[str, Any] = {}
    if update.date is not None:
        changes["date"] = normalize_date(update.date)
    if update.description is not None:
        changes["description"] = _normalize_description(update.description)
    if update.category is not None:
        changes["category"] = _normalize_category(update.category)
    if update.amount is not None:
        changes["amount"] = normalize_amount(update.amount)

    if not changes:
        raise InvalidTransactionError("No fields to update in TransactionUpdate.")

    return replace(transaction, **changes)


def field_of(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a Transaction-like record (object or mapping)."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def iter_records(transactions: Any) -> Iterator[Any]:
    """Iterate over Transaction-like records.

    Accepts any iterable of Transaction objects or mappings, or a pandas
    DataFrame whose rows carry the Transaction columns.
    """
    if isinstance(transactions, pd.DataFrame):
        yield from transactions.to_dict("records")
        return
    yield from transactions
