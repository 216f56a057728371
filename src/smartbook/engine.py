# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core statement aggregation engine for SmartBook.

This module maps a flat list of categorized cash transactions to the three
financial statements of a cash-basis bookkeeping:

1. Statement of profit or loss (SOPL)
   -----------------------------------
   For every transaction classified on the 'SOPL' statement, the signed
   value ``amount * effect`` is added to its line item and to net profit.

2. Statement of financial position (SOFP)
   ---------------------------------------
   'SOFP' transactions are routed by the section of their line item
   (substring match on 'Assets', 'Liabilities', 'Equity', see
   ``Classification.section``):
   - assets and liabilities accumulate the unsigned amount per account,
   - equity accumulates ``amount * effect`` per account.
   The running cash balance is stored as the asset line
   'Cash & Bank Balance', overwriting any account of that name.

3. Statement of cash flows (SOCF)
   -------------------------------
   Each transaction whose classification declares a flow is added to the
   matching section (operating / investing / financing) with a direction:
   negative for effect -1, fixed-asset purchases and owner drawings,
   positive otherwise.

Cash balance
------------
The cash balance is tracked separately from the cash-flow buckets with its
own rule (first match wins):
   - effect +1 on a non-SOFP statement  -> add,
   - effect -1                          -> subtract,
   - fixed-asset purchase account       -> subtract,
   - owner's capital or loan account    -> add,
   - anything else                      -> no cash movement.

Determinism
-----------
All sums are computed with ``math.fsum`` over the collected contributions,
so the report is identical for any ordering of the same transactions.
Unknown categories are skipped, and malformed amounts contribute zero;
the aggregation never raises for records that satisfy the Transaction
invariants.

The accounting identity ``assets = liabilities + equity`` (equity
including the net profit retained for the period) is advisory: a gap is
logged, never corrected.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Optional

from .classification import Classification, ClassificationTable
from .logging_setup import get_logger
from .transactions import field_of, iter_records

logger = get_logger(__name__)

CASH_ACCOUNT = "Cash & Bank Balance"
FIXED_ASSET_ACCOUNT = "Equipment"
DRAWINGS_ACCOUNT = "Owner's Drawings"
CAPITAL_ACCOUNT = "Owner's Capital"
LOAN_ACCOUNT = "Loan Payable"

REVENUE_LINE_ITEMS: tuple[str, ...] = ("Revenue", "Other Income")

BALANCE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PositionStatement:
    """Statement of financial position: account name -> total per section."""

    assets: dict[str, float] = field(default_factory=dict)
    liabilities: dict[str, float] = field(default_factory=dict)
    equity: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CashFlowStatement:
    """Statement of cash flows: account name -> signed total per section."""

    operating: dict[str, float] = field(default_factory=dict)
    investing: dict[str, float] = field(default_factory=dict)
    financing: dict[str, float] = field(default_factory=dict)

    def section(self, name: str) -> dict[str, float]:
        """Return a section by name ('operating', 'investing', 'financing')."""
        return getattr(self, name.lower())

    def section_total(self, name: str) -> float:
        return math.fsum(self.section(name).values())


@dataclass(frozen=True)
class AggregatedReport:
    """
    Derived statements for a set of transactions.

    Attributes
    ----------
    sopl :
        Line item -> signed total for profit-or-loss transactions.
    sofp :
        Assets, liabilities and equity mappings (account -> total). The
        assets mapping always contains the cash line ``CASH_ACCOUNT``.
    socf :
        Operating, investing and financing mappings (account -> signed
        cash-flow total).
    net_profit :
        Sum of all signed profit-or-loss values.
    """

    sopl: dict[str, float]
    sofp: PositionStatement
    socf: CashFlowStatement
    net_profit: float

    @property
    def total_revenue(self) -> float:
        """Revenue plus other income (missing lines count as zero)."""
        return math.fsum(self.sopl.get(line, 0.0) for line in REVENUE_LINE_ITEMS)

    @property
    def cash_balance(self) -> float:
        return self.sofp.assets.get(CASH_ACCOUNT, 0.0)

    @property
    def total_assets(self) -> float:
        return math.fsum(self.sofp.assets.values())

    @property
    def total_liabilities(self) -> float:
        return math.fsum(self.sofp.liabilities.values())

    @property
    def equity_accounts_total(self) -> float:
        return math.fsum(self.sofp.equity.values())

    @property
    def total_equity(self) -> float:
        """Equity accounts plus the net profit retained for the period."""
        return math.fsum([self.equity_accounts_total, self.net_profit])

    @property
    def net_cash_flow(self) -> float:
        return math.fsum(
            self.socf.section_total(name)
            for name in ("operating", "investing", "financing")
        )

    @property
    def balance_difference(self) -> float:
        """``total_assets - (total_liabilities + total_equity)``."""
        return math.fsum(
            [
                self.total_assets,
                -self.total_liabilities,
                -self.equity_accounts_total,
                -self.net_profit,
            ]
        )

    def is_balanced(self, tolerance: float = BALANCE_TOLERANCE) -> bool:
        return abs(self.balance_difference) <= tolerance


def coerce_amount(record: Any) -> Optional[float]:
    """Return the positive amount of a record, or None if malformed."""
    raw = field_of(record, "amount")
    try:
        amount = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def cash_flow_amount(classification: Classification, amount: float) -> float:
    """Signed cash-flow direction of a transaction."""
    if classification.effect == -1 or classification.account in (
        FIXED_ASSET_ACCOUNT,
        DRAWINGS_ACCOUNT,
    ):
        return -amount
    return amount


def cash_movement(classification: Classification, amount: float) -> float:
    """Signed contribution of a transaction to the running cash balance."""
    if classification.effect == 1 and not classification.is_position:
        return amount
    if classification.effect == -1:
        return -amount
    if classification.account == FIXED_ASSET_ACCOUNT:
        return -amount
    if classification.account in (CAPITAL_ACCOUNT, LOAN_ACCOUNT):
        return amount
    return 0.0


def _fsum_buckets(buckets: dict[str, list[float]]) -> dict[str, float]:
    return {key: math.fsum(values) for key, values in buckets.items()}


def aggregate(
    transactions: Any,
    table: Optional[ClassificationTable] = None,
) -> AggregatedReport:
    """Aggregate transactions into profit-or-loss, position and cash-flow
    statements.

    Args:
        transactions: Iterable of Transaction-like records (Transaction
            objects or mappings with ``category`` and ``amount``), or a
            pandas DataFrame with those columns. The collection is read
            once and never modified.
        table: Classification table to use. Defaults to the built-in
            category set.

    Returns:
        An AggregatedReport. An empty input yields empty statements, zero
        net profit and a zero cash line.
    """
    if table is None:
        table = ClassificationTable.default()

    sopl: dict[str, list[float]] = defaultdict(list)
    assets: dict[str, list[float]] = defaultdict(list)
    liabilities: dict[str, list[float]] = defaultdict(list)
    equity: dict[str, list[float]] = defaultdict(list)
    flows: dict[str, dict[str, list[float]]] = {
        "operating": defaultdict(list),
        "investing": defaultdict(list),
        "financing": defaultdict(list),
    }
    profit: list[float] = []
    cash: list[float] = []

    for record in iter_records(transactions):
        category = field_of(record, "category")
        classification = table.get(category)
        if classification is None:
            logger.debug("Unclassified category %r skipped.", category)
            continue

        amount = coerce_amount(record)
        if amount is None:
            logger.warning(
                "Transaction %r has an invalid amount %r, counted as zero.",
                field_of(record, "id"),
                field_of(record, "amount"),
            )
            continue

        # 1) Profit or loss
        if classification.is_profit_and_loss:
            value = amount * classification.effect
            sopl[classification.line_item].append(value)
            profit.append(value)

        # 2) Financial position
        section = classification.section
        if section == "assets":
            assets[classification.account].append(amount)
        elif section == "liabilities":
            liabilities[classification.account].append(amount)
        elif section == "equity":
            equity[classification.account].append(amount * classification.effect)

        # 3) Cash flows
        flow_bucket = flows.get((classification.flow or "").lower())
        if flow_bucket is not None:
            flow_bucket[classification.account].append(
                cash_flow_amount(classification, amount)
            )

        cash.append(cash_movement(classification, amount))

    asset_totals = _fsum_buckets(assets)
    asset_totals[CASH_ACCOUNT] = math.fsum(cash)

    report = AggregatedReport(
        sopl=_fsum_buckets(sopl),
        sofp=PositionStatement(
            assets=asset_totals,
            liabilities=_fsum_buckets(liabilities),
            equity=_fsum_buckets(equity),
        ),
        socf=CashFlowStatement(
            operating=_fsum_buckets(flows["operating"]),
            investing=_fsum_buckets(flows["investing"]),
            financing=_fsum_buckets(flows["financing"]),
        ),
        net_profit=math.fsum(profit),
    )

    if not report.is_balanced():
        logger.warning(
            "Statement of financial position does not balance "
            "(assets - liabilities - equity = %.2f).",
            report.balance_difference,
        )
    return report
