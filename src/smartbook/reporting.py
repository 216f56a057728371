# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report orchestration for SmartBook.

This module provides the high-level entry point used by the CLI (or any
other front end) to compute everything a report view needs in a single
call:

1. the monthly trend over the full transaction history,
2. the period selection for the requested month,
3. the aggregated report of the month (flow statements: SOPL),
4. the aggregated report cumulative to the end of the month (position and
   cash-flow statements),
5. the health ratios derived from the cumulative report.

When no month is requested, the cumulative slice is the whole history and
no period report is produced.

The caller's collection is copied once (``list(...)``) before any
computation, so the orchestration works on a consistent snapshot and never
keeps references into the caller's container.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .classification import ClassificationTable
from .engine import AggregatedReport, aggregate
from .logging_setup import get_logger
from .periods import PeriodSelection, select_period
from .ratios import HealthRatios, compute_ratios
from .transactions import iter_records
from .trends import MonthlyTrend, monthly_trend

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReportBundle:
    """
    All derived outputs for one reporting request.

    Attributes
    ----------
    month :
        Requested month ('YYYY-MM') or None for the whole history.
    trend :
        Monthly trend over the full history.
    selection :
        Period selection for ``month`` (None when no month is requested).
    period_report :
        Aggregated report of the month's transactions (None when no month
        is requested).
    cumulative_report :
        Aggregated report of every transaction up to the end of the month
        (or the whole history).
    ratios :
        Health ratios derived from ``cumulative_report``.
    transaction_count :
        Number of transactions in the snapshot (whole history).
    """

    month: Optional[str]
    trend: MonthlyTrend
    selection: Optional[PeriodSelection]
    period_report: Optional[AggregatedReport]
    cumulative_report: AggregatedReport
    ratios: HealthRatios
    transaction_count: int = 0

    @property
    def has_data(self) -> bool:
        """False when there is nothing to report (render a "no data" state)."""
        if self.selection is not None:
            return self.selection.has_data
        return self.transaction_count > 0


def compute_reports(
    transactions: Any,
    month: Optional[str] = None,
    table: Optional[ClassificationTable] = None,
) -> ReportBundle:
    """Compute trend, period and cumulative statements and ratios.

    Args:
        transactions: Iterable of Transaction-like records or a DataFrame.
        month: Reporting month 'YYYY-MM', or None for the whole history.
        table: Classification table. Defaults to the built-in category set.

    Raises:
        ValueError: if ``month`` is not a 'YYYY-MM' string.
    """
    if table is None:
        table = ClassificationTable.default()
    snapshot = list(iter_records(transactions))

    trend = monthly_trend(snapshot, table)

    if month:
        selection = select_period(snapshot, month)
        period_report: Optional[AggregatedReport] = aggregate(
            selection.period, table
        )
        cumulative_report = aggregate(selection.cumulative, table)
        logger.debug(
            "Month %s: %d period / %d cumulative transactions.",
            selection.month,
            len(selection.period),
            len(selection.cumulative),
        )
    else:
        selection = None
        period_report = None
        cumulative_report = aggregate(snapshot, table)

    return ReportBundle(
        month=selection.month if selection is not None else None,
        trend=trend,
        selection=selection,
        period_report=period_report,
        cumulative_report=cumulative_report,
        ratios=compute_ratios(cumulative_report),
        transaction_count=len(snapshot),
    )
