# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Health ratios for SmartBook.

Three dimensionless scores are derived from a cumulative AggregatedReport:

1. Profitability
   --------------
       net_profit / total_revenue        if total_revenue > 0, else 0
   where total_revenue = 'Revenue' + 'Other Income' line items.

2. Financial safety
   -----------------
       total_assets / total_liabilities  if total_liabilities > 0
       +infinity                         if no liabilities and assets > 0
       0                                 otherwise
   Callers must special-case the infinite value for display.

3. Asset efficiency
   -----------------
       net_profit / total_assets         if total_assets > 0, else 0

Division by zero never raises: each ratio has an explicit fallback.

The module also carries the dashboard ratings used to colour the scores
('good', 'fair', 'poor') and the short explanation shown under the safety
score.
"""

import math
from dataclasses import dataclass

from .engine import AggregatedReport

GOOD = "good"
FAIR = "fair"
POOR = "poor"

PROFITABILITY_GOOD_THRESHOLD = 0.10
SAFETY_GOOD_THRESHOLD = 2.0
SAFETY_FAIR_THRESHOLD = 1.0


@dataclass(frozen=True)
class HealthRatios:
    """
    Health scores derived from a cumulative report.

    Attributes:
        profitability: Share of every unit of revenue that turns into profit.
        safety: How many times assets cover liabilities (may be +inf).
        asset_efficiency: Profit generated per unit of assets.
    """

    profitability: float
    safety: float
    asset_efficiency: float


def profitability_score(report: AggregatedReport) -> float:
    total_revenue = report.total_revenue
    if total_revenue > 0:
        return report.net_profit / total_revenue
    return 0.0


def safety_score(report: AggregatedReport) -> float:
    total_assets = report.total_assets
    total_liabilities = report.total_liabilities
    if total_liabilities > 0:
        return total_assets / total_liabilities
    if total_assets > 0:
        return math.inf
    return 0.0


def asset_efficiency_score(report: AggregatedReport) -> float:
    total_assets = report.total_assets
    if total_assets > 0:
        return report.net_profit / total_assets
    return 0.0


def compute_ratios(report: AggregatedReport) -> HealthRatios:
    """Compute the three health ratios from a cumulative report.

    The report is only read; the aggregation is not recomputed.
    """
    return HealthRatios(
        profitability=profitability_score(report),
        safety=safety_score(report),
        asset_efficiency=asset_efficiency_score(report),
    )


# ---------------------------------------------------------------------------
# Dashboard ratings
# ---------------------------------------------------------------------------


def rate_profitability(value: float) -> str:
    if value >= PROFITABILITY_GOOD_THRESHOLD:
        return GOOD
    if value > 0:
        return FAIR
    return POOR


def rate_safety(value: float) -> str:
    if math.isinf(value) or value >= SAFETY_GOOD_THRESHOLD:
        return GOOD
    if value >= SAFETY_FAIR_THRESHOLD:
        return FAIR
    return POOR


def rate_asset_efficiency(value: float) -> str:
    return GOOD if value >= 0 else POOR


def safety_explanation(value: float) -> str:
    """Short sentence explaining the safety score."""
    if math.isinf(value):
        return "No debt recorded, indicating very high financial security."
    if value >= SAFETY_FAIR_THRESHOLD:
        return (
            f"Your assets can cover debts {value:.1f} times. Score > 1 is safe."
        )
    return "Your debts are higher than your assets. Take immediate action."
