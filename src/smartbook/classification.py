# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category classification table for SmartBook.

This module defines how a transaction's category label is interpreted by
the statement aggregator. Each category key maps to one Classification
describing:

- the ledger account the cash movement belongs to,
- the statement it feeds ("SOPL" for profit or loss, "SOFP" for the
  statement of financial position),
- the statement section (line item) the account rolls into,
- the sign effect applied to the amount when it affects profit or equity,
- the cash-flow section (Operating / Investing / Financing), if any.

The table is configuration, not derived state: it is built once (from the
built-in defaults or from a CSV file) and never mutated afterwards.

Lookups for unknown categories return None. Callers treat this as
"exclude from all statements", never as an error. The helpers
``split_classified`` and ``summarize_unclassified`` let higher layers
report what was excluded.

This module exposes:
- Classification:        one classification entry.
- ClassificationTable:   immutable lookup category -> Classification.
- DEFAULT_CLASSIFICATIONS: built-in category set.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, Union

import pandas as pd

from .transactions import field_of, iter_records

PROFIT_AND_LOSS = "SOPL"
POSITION = "SOFP"

STATEMENTS: tuple[str, ...] = (PROFIT_AND_LOSS, POSITION)
FLOWS: tuple[str, ...] = ("Operating", "Investing", "Financing")

# Position sections, matched in this order against the line-item label.
SECTION_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("Assets", "assets"),
    ("Liabilities", "liabilities"),
    ("Equity", "equity"),
)

CSV_COLUMNS: tuple[str, ...] = (
    "category",
    "account",
    "statement",
    "line_item",
    "effect",
    "flow",
)


@dataclass(frozen=True)
class Classification:
    """Accounting treatment of one transaction category.

    Attributes:
        account: Canonical ledger account name (e.g. 'Rent Expense').
        statement: 'SOPL' (profit or loss) or 'SOFP' (financial position).
        line_item: Statement section the account rolls into
            (e.g. 'Revenue', 'Operating Expenses', 'Non-current Assets').
        effect: +1 or -1, sign applied to the amount when it affects net
            profit or net equity.
        flow: Cash-flow section ('Operating', 'Investing', 'Financing') or
            None when the category has no cash-flow classification.
    """

    account: str
    statement: str
    line_item: str
    effect: int
    flow: Optional[str] = None

    @property
    def section(self) -> Optional[str]:
        """Position section derived from the line-item label.

        The label is matched by substring ('Non-current Assets' -> 'assets',
        'Equity (Reduction)' -> 'equity'), so extended category sets can
        introduce new labels without code changes. Returns None for
        profit-or-loss entries and for labels matching no section.
        """
        if self.statement != POSITION:
            return None
        for keyword, section in SECTION_KEYWORDS:
            if keyword in self.line_item:
                return section
        return None

    @property
    def is_profit_and_loss(self) -> bool:
        return self.statement == PROFIT_AND_LOSS

    @property
    def is_position(self) -> bool:
        return self.statement == POSITION


DEFAULT_CLASSIFICATIONS: Mapping[str, Classification] = MappingProxyType(
    {
        "Sales Revenue": Classification(
            "Sales Revenue", PROFIT_AND_LOSS, "Revenue", 1, "Operating"
        ),
        "Interest Received": Classification(
            "Interest Income", PROFIT_AND_LOSS, "Other Income", 1, "Operating"
        ),
        "Rent Expense": Classification(
            "Rent Expense", PROFIT_AND_LOSS, "Operating Expenses", -1, "Operating"
        ),
        "Utilities Expense": Classification(
            "Utilities Expense",
            PROFIT_AND_LOSS,
            "Operating Expenses",
            -1,
            "Operating",
        ),
        "Wages & Salaries": Classification(
            "Wages & Salaries Expense",
            PROFIT_AND_LOSS,
            "Operating Expenses",
            -1,
            "Operating",
        ),
        "Supplies & Consumables": Classification(
            "Supplies Expense",
            PROFIT_AND_LOSS,
            "Operating Expenses",
            -1,
            "Operating",
        ),
        "Other Operating Expense": Classification(
            "Other Operating Expense",
            PROFIT_AND_LOSS,
            "Operating Expenses",
            -1,
            "Operating",
        ),
        "Equipment Purchase": Classification(
            "Equipment", POSITION, "Non-current Assets", 1, "Investing"
        ),
        "Capital Injection": Classification(
            "Owner's Capital", POSITION, "Equity", 1, "Financing"
        ),
        "Loan Received": Classification(
            "Loan Payable", POSITION, "Non-current Liabilities", 1, "Financing"
        ),
        "Drawings": Classification(
            "Owner's Drawings", POSITION, "Equity (Reduction)", -1, "Financing"
        ),
    }
)


def _clean(value: Any) -> str:
    """Return a stripped string, mapping None/NaN to ''."""
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def _parse_effect(raw: Any, category: str) -> int:
    message = f"Invalid effect {raw!r} for category {category!r}, expected 1 or -1."
    try:
        value = float(_clean(raw))
    except ValueError as exc:
        raise ValueError(message) from exc
    # Exact comparison: 1.7 or inf must not be truncated into a sign.
    if value not in (1.0, -1.0):
        raise ValueError(message)
    return int(value)


def _parse_flow(raw: Any, category: str) -> Optional[str]:
    text = _clean(raw)
    if not text:
        return None
    for flow in FLOWS:
        if text.lower() == flow.lower():
            return flow
    raise ValueError(
        f"Invalid flow {raw!r} for category {category!r}. "
        f"Expected one of: {', '.join(FLOWS)} (or empty)."
    )


class ClassificationTable:
    """Immutable lookup from category key to Classification.

    A table can be built from the built-in defaults, from a mapping of
    Classification objects or from a DataFrame / CSV file with the columns
    ``category, account, statement, line_item, effect, flow``.
    """

    def __init__(self, entries: Mapping[str, Classification]):
        self._entries: Mapping[str, Classification] = MappingProxyType(
            dict(entries)
        )

    @classmethod
    def default(cls) -> "ClassificationTable":
        """Return the built-in category set."""
        return cls(DEFAULT_CLASSIFICATIONS)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "ClassificationTable":
        """Build a table from a DataFrame.

        Raises:
            ValueError: if required columns are missing, a statement is not
                'SOPL'/'SOFP', an effect is not +1/-1, a flow is unknown or a
                category appears twice.
        """
        df = df.copy()
        df.columns = [str(c).strip().lower() for c in df.columns]
        missing = [c for c in CSV_COLUMNS if c != "flow" and c not in df.columns]
        if missing:
            raise ValueError(
                "Classification table is missing required column(s): "
                + ", ".join(missing)
            )

        entries: dict[str, Classification] = {}
        for _, r in df.iterrows():
            category = _clean(r["category"])
            if not category:
                continue
            if category in entries:
                raise ValueError(f"Duplicate category {category!r} in table.")

            statement = _clean(r["statement"]).upper()
            if statement not in STATEMENTS:
                raise ValueError(
                    f"Invalid statement {r['statement']!r} for category "
                    f"{category!r}, expected 'SOPL' or 'SOFP'."
                )

            entries[category] = Classification(
                account=_clean(r["account"]) or category,
                statement=statement,
                line_item=_clean(r["line_item"]),
                effect=_parse_effect(r["effect"], category),
                flow=_parse_flow(r.get("flow", ""), category),
            )
        return cls(entries)

    @classmethod
    def from_csv(cls, path: Union[str, Path]) -> "ClassificationTable":
        """Load a table from a CSV file (see ``CSV_COLUMNS``)."""
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        return cls.from_dataframe(df)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the table as a DataFrame with ``CSV_COLUMNS``."""
        rows = [
            {
                "category": key,
                "account": c.account,
                "statement": c.statement,
                "line_item": c.line_item,
                "effect": c.effect,
                "flow": c.flow or "",
            }
            for key, c in self._entries.items()
        ]
        return pd.DataFrame(rows, columns=list(CSV_COLUMNS))

    def get(self, category: Any) -> Optional[Classification]:
        """Return the classification of a category, or None if unknown."""
        if not isinstance(category, str):
            return None
        return self._entries.get(category)

    def categories(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, category: object) -> bool:
        return isinstance(category, str) and category in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _to_float_or_nan(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


def split_classified(
    transactions: Iterable[Any],
    table: Optional[ClassificationTable] = None,
) -> tuple[list[Any], list[Any]]:
    """Split transactions into (classified, unclassified) lists.

    The input order is preserved inside each list. The input collection is
    not modified.
    """
    if table is None:
        table = ClassificationTable.default()
    classified: list[Any] = []
    unclassified: list[Any] = []
    for t in iter_records(transactions):
        if table.get(field_of(t, "category")) is None:
            unclassified.append(t)
        else:
            classified.append(t)
    return classified, unclassified


def summarize_unclassified(
    transactions: Iterable[Any],
    table: Optional[ClassificationTable] = None,
) -> pd.DataFrame:
    """Summarize transactions excluded from the statements.

    Returns:
        A DataFrame with columns ``category, count, total_amount`` (one row
        per unknown category, sorted by category). Empty when every
        transaction is classified.
    """
    _, unclassified = split_classified(transactions, table)
    if not unclassified:
        return pd.DataFrame(columns=["category", "count", "total_amount"])

    rows = []
    for t in unclassified:
        rows.append(
            {
                "category": str(field_of(t, "category")),
                "amount": _to_float_or_nan(field_of(t, "amount")),
            }
        )
    df = pd.DataFrame(rows)
    summary = (
        df.groupby("category", as_index=False)
        .agg(count=("amount", "size"), total_amount=("amount", "sum"))
        .sort_values("category", kind="stable")
        .reset_index(drop=True)
    )
    return summary
