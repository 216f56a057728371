# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly trend of revenue, expenses and net profit.

Only profit-or-loss transactions are considered. They are grouped by the
year-month of their date and, within a month, each transaction's signed
value ``amount * effect`` is routed by its own sign:

- positive values add to revenue,
- negative values add to expenses,
- every value adds to net profit.

Two categories sharing a line item can therefore land in different buckets.
Months without any profit-or-loss transaction are absent from the output
(the series is sparse, not zero-filled). Expenses are reported as positive
magnitudes for display.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from .classification import ClassificationTable
from .engine import coerce_amount
from .logging_setup import get_logger
from .periods import month_of
from .transactions import field_of, iter_records

logger = get_logger(__name__)


@dataclass(frozen=True)
class MonthlyTrend:
    """Monthly series ordered by ascending month key.

    Attributes:
        labels: Month keys ('YYYY-MM').
        revenue: Sum of positive signed values per month.
        expenses: Magnitude of the sum of negative signed values per month.
        net_profit: Sum of all signed values per month.
    """

    labels: list[str] = field(default_factory=list)
    revenue: list[float] = field(default_factory=list)
    expenses: list[float] = field(default_factory=list)
    net_profit: list[float] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.labels

    def to_frame(self) -> pd.DataFrame:
        """Return the series as a DataFrame (one row per month)."""
        return pd.DataFrame(
            {
                "month": self.labels,
                "revenue": self.revenue,
                "expenses": self.expenses,
                "net_profit": self.net_profit,
            },
            columns=["month", "revenue", "expenses", "net_profit"],
        )


def monthly_trend(
    transactions: Any,
    table: Optional[ClassificationTable] = None,
) -> MonthlyTrend:
    """Bucket profit-or-loss transactions by calendar month.

    Args:
        transactions: Iterable of Transaction-like records or a DataFrame.
        table: Classification table. Defaults to the built-in category set.

    Returns:
        A MonthlyTrend with one entry per month that has at least one
        profit-or-loss transaction.
    """
    if table is None:
        table = ClassificationTable.default()

    revenue: dict[str, list[float]] = defaultdict(list)
    expenses: dict[str, list[float]] = defaultdict(list)
    profit: dict[str, list[float]] = defaultdict(list)

    for record in iter_records(transactions):
        classification = table.get(field_of(record, "category"))
        if classification is None or not classification.is_profit_and_loss:
            continue

        amount = coerce_amount(record)
        if amount is None:
            logger.warning(
                "Transaction %r has an invalid amount %r, left out of the trend.",
                field_of(record, "id"),
                field_of(record, "amount"),
            )
            continue

        key = month_of(field_of(record, "date"))
        value = amount * classification.effect
        profit[key].append(value)
        if value > 0:
            revenue[key].append(value)
        else:
            expenses[key].append(value)

    months = sorted(profit)
    return MonthlyTrend(
        labels=months,
        revenue=[math.fsum(revenue[m]) for m in months],
        # 0.0 - x keeps an empty month at +0.0 rather than -0.0
        expenses=[0.0 - math.fsum(expenses[m]) for m in months],
        net_profit=[math.fsum(profit[m]) for m in months],
    )
