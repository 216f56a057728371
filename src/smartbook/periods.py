# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for SmartBook.

A reporting period is a calendar month identified by its 'YYYY-MM' key.
For a target month, transactions are partitioned into two slices:

- the period slice: transactions dated within the month (flow statements),
- the cumulative slice: every transaction dated on or before the end of the
  month (position statements and ratios).

Both comparisons work on ISO date strings. The cumulative upper bound is
the string ``month + "-31"`` compared lexicographically: no month has more
than 31 days, so no valid date of the month is excluded. The bound is not
calendar-aware and would admit a cosmetically invalid string such as
'2024-02-30'; this is accepted behavior.
"""

import re
from calendar import month_name
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .transactions import field_of, iter_records

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


@dataclass(frozen=True)
class PeriodSelection:
    """Transactions selected for one reporting month."""

    month: str
    period: list[Any] = field(default_factory=list)
    cumulative: list[Any] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        """False when both slices are empty (render a "no data" state)."""
        return bool(self.period or self.cumulative)


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def validate_month(month: str) -> str:
    """Return ``month`` stripped, or raise ValueError if not 'YYYY-MM'."""
    text = str(month).strip() if month is not None else ""
    if not _MONTH_RE.match(text):
        raise ValueError(f"Invalid reporting month {month!r}, expected YYYY-MM.")
    return text


def current_month() -> str:
    """Default reporting month: the current calendar month."""
    return _today().strftime("%Y-%m")


def cumulative_upper_bound(month: str) -> str:
    """Inclusive upper bound of the cumulative slice ('YYYY-MM-31')."""
    return f"{validate_month(month)}-31"


def date_key(value: Any) -> str:
    """Return the ISO string form used for comparisons."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return "" if value is None else str(value)


def month_of(value: Any) -> str:
    """Year-month key of a date ('2024-01-05' -> '2024-01')."""
    return date_key(value)[:7]


def select_period(transactions: Any, month: str) -> PeriodSelection:
    """Split transactions into the period slice and the cumulative slice.

    Args:
        transactions: Iterable of Transaction-like records or a DataFrame.
        month: Target month 'YYYY-MM'.

    Returns:
        A PeriodSelection. Input order is preserved within each slice and the
        input collection is not modified.

    Raises:
        ValueError: if ``month`` is not a 'YYYY-MM' string.
    """
    month = validate_month(month)
    upper = cumulative_upper_bound(month)

    period: list[Any] = []
    cumulative: list[Any] = []
    for t in iter_records(transactions):
        key = date_key(field_of(t, "date"))
        if key[:7] == month:
            period.append(t)
        if key <= upper:
            cumulative.append(t)

    return PeriodSelection(month=month, period=period, cumulative=cumulative)


def format_month_label(month: str) -> str:
    """Human-readable label for a month key ('2024-01' -> 'January 2024')."""
    if not month:
        return "No period selected"
    month = validate_month(month)
    year, mm = month.split("-")
    return f"{month_name[int(mm)]} {year}"
