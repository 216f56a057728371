# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for SmartBook.

This module turns the derived statements (``engine.AggregatedReport``),
health ratios and monthly trend into pandas DataFrames ready for display
or CSV export. It performs no accounting: every figure comes from the
engine, and the helpers here only lay them out as rows.

Each statement frame shares the same columns:

- display_order: 10, 20, 30, ... (row order of the printed statement),
- section:       statement section the row belongs to,
- name:          label printed for the row,
- type:          'header', 'line', 'total' or 'net',
- amount:        figure rounded to 2 decimals (NaN for headers).

The formatting helpers (``format_currency``, ``format_percentage``,
``format_safety``) produce the strings used by the CLI tables.
"""

import math
from collections.abc import Iterable
from typing import Any

import pandas as pd

from .engine import CASH_ACCOUNT, AggregatedReport
from .ratios import (
    HealthRatios,
    rate_asset_efficiency,
    rate_profitability,
    rate_safety,
    safety_explanation,
)
from .transactions import field_of, iter_records
from .trends import MonthlyTrend

STATEMENT_COLUMNS = ["display_order", "section", "name", "type", "amount"]
TRANSACTION_COLUMNS = ["id", "date", "description", "category", "amount", "timestamp"]

DEFAULT_CURRENCY = "RM"


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_currency(amount: Any, currency: str = DEFAULT_CURRENCY) -> str:
    """Format an amount as 'RM 1,234.50' (invalid amounts print as 0.00)."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{currency} {abs(value):,.2f}"


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value * 100:.{decimals}f}%"


def format_safety(value: float, decimals: int = 1) -> str:
    """Format the safety score as '2.5:1', or '∞' when there is no debt."""
    if math.isinf(value):
        return "∞"
    return f"{value:.{decimals}f}:1"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _row(section: str, name: str, row_type: str, amount: float | None) -> dict:
    return {
        "section": section,
        "name": name,
        "type": row_type,
        "amount": float("nan") if amount is None else round(float(amount), 2),
    }


def _finalize(rows: list[dict]) -> pd.DataFrame:
    """Number rows 10, 20, 30, ... in their current order and fix columns."""
    if not rows:
        return pd.DataFrame(columns=STATEMENT_COLUMNS)
    df = pd.DataFrame(rows).reset_index(drop=True)
    df["display_order"] = (df.index + 1) * 10
    return df[STATEMENT_COLUMNS]


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def sopl_to_dataframe(report: AggregatedReport) -> pd.DataFrame:
    """Statement of profit or loss.

    Line items with a positive total are listed under REVENUE, those with a
    negative total under EXPENSES (shown as magnitudes). The last row is the
    net profit (or loss).
    """
    revenue_lines = [(k, v) for k, v in report.sopl.items() if v > 0]
    expense_lines = [(k, v) for k, v in report.sopl.items() if v < 0]

    rows = [_row("revenue", "REVENUE", "header", None)]
    rows += [_row("revenue", name, "line", value) for name, value in revenue_lines]
    rows.append(
        _row(
            "revenue",
            "TOTAL REVENUE",
            "total",
            math.fsum(v for _, v in revenue_lines),
        )
    )

    rows.append(_row("expenses", "EXPENSES", "header", None))
    rows += [_row("expenses", name, "line", -value) for name, value in expense_lines]
    rows.append(
        _row(
            "expenses",
            "TOTAL EXPENSES",
            "total",
            -math.fsum(v for _, v in expense_lines),
        )
    )

    rows.append(_row("net_profit", "NET PROFIT / (LOSS)", "net", report.net_profit))
    return _finalize(rows)


def sofp_to_dataframe(report: AggregatedReport) -> pd.DataFrame:
    """Statement of financial position.

    The cash line is listed first among the assets. Equity shows the equity
    accounts followed by the net profit retained for the period, so that
    TOTAL ASSETS and TOTAL LIABILITIES & EQUITY can be compared directly.
    """
    sofp = report.sofp

    rows = [_row("assets", "ASSETS", "header", None)]
    rows.append(_row("assets", CASH_ACCOUNT, "line", report.cash_balance))
    rows += [
        _row("assets", name, "line", value)
        for name, value in sofp.assets.items()
        if name != CASH_ACCOUNT
    ]
    rows.append(_row("assets", "TOTAL ASSETS", "total", report.total_assets))

    rows.append(_row("liabilities", "LIABILITIES", "header", None))
    rows += [
        _row("liabilities", name, "line", value)
        for name, value in sofp.liabilities.items()
    ]
    rows.append(
        _row("liabilities", "TOTAL LIABILITIES", "total", report.total_liabilities)
    )

    rows.append(_row("equity", "EQUITY", "header", None))
    rows += [_row("equity", name, "line", value) for name, value in sofp.equity.items()]
    rows.append(
        _row("equity", "Retained Earnings / Net Profit", "line", report.net_profit)
    )
    rows.append(_row("equity", "CLOSING EQUITY", "total", report.total_equity))

    rows.append(
        _row(
            "check",
            "TOTAL LIABILITIES & EQUITY",
            "net",
            math.fsum([report.total_liabilities, report.total_equity]),
        )
    )
    return _finalize(rows)


_CASH_FLOW_SECTIONS: tuple[tuple[str, str, str], ...] = (
    (
        "operating",
        "CASH FLOW FROM OPERATING ACTIVITIES",
        "Net Cash from Operating Activities",
    ),
    (
        "investing",
        "CASH FLOW FROM INVESTING ACTIVITIES",
        "Net Cash from Investing Activities",
    ),
    (
        "financing",
        "CASH FLOW FROM FINANCING ACTIVITIES",
        "Net Cash from Financing Activities",
    ),
)


def socf_to_dataframe(report: AggregatedReport) -> pd.DataFrame:
    """Statement of cash flows: three sections, net change and ending cash."""
    rows: list[dict] = []
    for key, title, subtotal in _CASH_FLOW_SECTIONS:
        rows.append(_row(key, title, "header", None))
        rows += [
            _row(key, name, "line", value)
            for name, value in report.socf.section(key).items()
        ]
        rows.append(_row(key, subtotal, "total", report.socf.section_total(key)))

    rows.append(
        _row(
            "summary",
            "Net Increase / (Decrease) in Cash",
            "total",
            report.net_cash_flow,
        )
    )
    rows.append(_row("summary", "ENDING CASH BALANCE", "net", report.cash_balance))
    return _finalize(rows)


# ---------------------------------------------------------------------------
# Ratios, trend and transaction list
# ---------------------------------------------------------------------------


def ratios_to_dataframe(ratios: HealthRatios, decimals: int = 1) -> pd.DataFrame:
    """
    Convert HealthRatios into a DataFrame.

    Columns:
        - key:     internal ratio identifier,
        - label:   human-readable label,
        - value:   raw value (may be inf for the safety score),
        - display: formatted string ('12.5%', '2.5:1', '∞'),
        - rating:  'good', 'fair' or 'poor',
        - notes:   short explanation.
    """
    rows = [
        {
            "key": "profitability",
            "label": "Profitability Score",
            "value": ratios.profitability,
            "display": format_percentage(ratios.profitability, decimals),
            "rating": rate_profitability(ratios.profitability),
            "notes": (
                "The percentage of every RM1 of sales that turns into profit."
            ),
        },
        {
            "key": "safety",
            "label": "Financial Safety Score",
            "value": ratios.safety,
            "display": format_safety(ratios.safety, decimals),
            "rating": rate_safety(ratios.safety),
            "notes": safety_explanation(ratios.safety),
        },
        {
            "key": "asset_efficiency",
            "label": "Asset Efficiency Score",
            "value": ratios.asset_efficiency,
            "display": format_percentage(ratios.asset_efficiency, decimals),
            "rating": rate_asset_efficiency(ratios.asset_efficiency),
            "notes": (
                "How much profit you generate for every RM1 worth of assets."
            ),
        },
    ]
    return pd.DataFrame(
        rows, columns=["key", "label", "value", "display", "rating", "notes"]
    )


def trend_to_dataframe(trend: MonthlyTrend) -> pd.DataFrame:
    """Monthly trend rounded to 2 decimals (one row per month)."""
    return trend.to_frame().round(
        {"revenue": 2, "expenses": 2, "net_profit": 2}
    )


def transactions_to_dataframe(transactions: Iterable[Any]) -> pd.DataFrame:
    """Transaction list sorted newest first (by date, then creation time)."""
    rows = [
        {col: field_of(t, col) for col in TRANSACTION_COLUMNS}
        for t in iter_records(transactions)
    ]
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    df["timestamp"] = df["timestamp"].fillna("")
    df = df.sort_values(
        ["date", "timestamp"], ascending=False, kind="stable"
    ).reset_index(drop=True)
    return df
