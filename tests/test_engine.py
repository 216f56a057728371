import itertools
import math

import pandas as pd
import pytest

from smartbook.classification import Classification, ClassificationTable
from smartbook.engine import (
    CASH_ACCOUNT,
    aggregate,
    cash_flow_amount,
    cash_movement,
)
from smartbook.transactions import NewTransaction, create_transaction


def tx(date: str, category: str, amount: float, tx_id: str = ""):
    return create_transaction(
        NewTransaction(
            date=date, description=category, category=category, amount=amount
        ),
        transaction_id=tx_id or f"{date}-{category}-{amount}",
        timestamp="2024-01-01T00:00:00+00:00",
    )


SCENARIO_1 = [
    tx("2024-01-05", "Sales Revenue", 1000),
    tx("2024-01-10", "Rent Expense", 300),
]

MIXED = [
    tx("2024-01-01", "Capital Injection", 5000),
    tx("2024-01-02", "Loan Received", 2000),
    tx("2024-01-05", "Sales Revenue", 1200.10),
    tx("2024-01-06", "Interest Received", 15.55),
    tx("2024-01-07", "Rent Expense", 300),
    tx("2024-01-08", "Wages & Salaries", 450.20),
    tx("2024-01-09", "Utilities Expense", 80.05),
    tx("2024-01-10", "Equipment Purchase", 1500),
    tx("2024-01-11", "Drawings", 250),
    tx("2024-01-12", "Supplies & Consumables", 33.3),
]


def test_scenario_revenue_and_rent() -> None:
    report = aggregate(SCENARIO_1)

    assert report.sopl == {"Revenue": 1000.0, "Operating Expenses": -300.0}
    assert report.net_profit == 700.0
    assert report.cash_balance == 700.0
    assert report.socf.operating == {"Sales Revenue": 1000.0, "Rent Expense": -300.0}


def test_scenario_equipment_purchase() -> None:
    report = aggregate([*SCENARIO_1, tx("2024-01-15", "Equipment Purchase", 500)])

    assert report.sofp.assets["Equipment"] == 500.0
    assert report.cash_balance == 200.0
    assert report.socf.investing == {"Equipment": -500.0}
    # Net profit is not affected by a position transaction.
    assert report.net_profit == 700.0


def test_empty_input_yields_zero_report() -> None:
    report = aggregate([])

    assert report.sopl == {}
    assert report.net_profit == 0.0
    assert report.sofp.assets == {CASH_ACCOUNT: 0.0}
    assert report.sofp.liabilities == {}
    assert report.sofp.equity == {}
    assert report.net_cash_flow == 0.0
    assert report.is_balanced()


def test_capital_loan_and_drawings_routing() -> None:
    report = aggregate(
        [
            tx("2024-01-01", "Capital Injection", 5000),
            tx("2024-01-02", "Loan Received", 2000),
            tx("2024-01-03", "Drawings", 400),
        ]
    )

    assert report.sofp.equity == {"Owner's Capital": 5000.0, "Owner's Drawings": -400.0}
    assert report.sofp.liabilities == {"Loan Payable": 2000.0}
    assert report.cash_balance == 6600.0
    assert report.socf.financing == {
        "Owner's Capital": 5000.0,
        "Loan Payable": 2000.0,
        "Owner's Drawings": -400.0,
    }


def test_aggregation_is_order_independent() -> None:
    """Every permutation of the same transactions yields the same report."""
    sample = MIXED[:6]
    reference = aggregate(sample)
    for perm in itertools.permutations(sample):
        assert aggregate(list(perm)) == reference


def test_aggregation_is_order_independent_on_reversed_mixed_set() -> None:
    assert aggregate(MIXED) == aggregate(list(reversed(MIXED)))


def test_aggregation_is_additive_over_disjoint_sets() -> None:
    a, b = MIXED[:5], MIXED[5:]
    ra, rb, rab = aggregate(a), aggregate(b), aggregate(MIXED)

    def combined(x: dict, y: dict) -> dict:
        return {k: x.get(k, 0.0) + y.get(k, 0.0) for k in set(x) | set(y)}

    assert rab.sopl == pytest.approx(combined(ra.sopl, rb.sopl))
    for name in ("operating", "investing", "financing"):
        assert rab.socf.section(name) == pytest.approx(
            combined(ra.socf.section(name), rb.socf.section(name))
        )
    assert rab.cash_balance == pytest.approx(ra.cash_balance + rb.cash_balance)
    assert rab.net_profit == pytest.approx(ra.net_profit + rb.net_profit)


def test_accounting_identity_holds_for_known_categories() -> None:
    report = aggregate(MIXED)

    assert report.total_assets == pytest.approx(
        report.total_liabilities + report.total_equity, abs=1e-9
    )
    assert report.is_balanced()


def test_ending_cash_equals_net_cash_flow_for_default_table() -> None:
    report = aggregate(MIXED)
    assert report.cash_balance == pytest.approx(report.net_cash_flow)


def test_unknown_category_is_ignored() -> None:
    baseline = aggregate(SCENARIO_1)
    with_unknown = aggregate([*SCENARIO_1, tx("2024-01-20", "Lottery Winnings", 9999)])

    assert with_unknown == baseline


def test_cash_account_name_in_table_is_overwritten_by_running_cash() -> None:
    table = ClassificationTable(
        {
            "Sales Revenue": Classification(
                "Sales Revenue", "SOPL", "Revenue", 1, "Operating"
            ),
            "Bank Top-up": Classification(
                CASH_ACCOUNT, "SOFP", "Current Assets", 1, None
            ),
        }
    )
    report = aggregate(
        [
            tx("2024-01-05", "Sales Revenue", 100),
            tx("2024-01-06", "Bank Top-up", 999),
        ],
        table,
    )

    assert report.sofp.assets[CASH_ACCOUNT] == 100.0


def test_extended_labels_are_routed_by_substring() -> None:
    table = ClassificationTable(
        {
            "Deposit Paid": Classification(
                "Rental Deposit", "SOFP", "Current Assets", 1, "Investing"
            ),
            "Supplier Credit": Classification(
                "Trade Payables", "SOFP", "Current Liabilities", 1, "Operating"
            ),
            "Partner Top-up": Classification(
                "Partner Capital", "SOFP", "Partner Equity", 1, "Financing"
            ),
        }
    )
    report = aggregate(
        [
            tx("2024-01-01", "Deposit Paid", 100),
            tx("2024-01-02", "Supplier Credit", 50),
            tx("2024-01-03", "Partner Top-up", 10),
        ],
        table,
    )

    assert report.sofp.assets["Rental Deposit"] == 100.0
    assert report.sofp.liabilities == {"Trade Payables": 50.0}
    assert report.sofp.equity == {"Partner Capital": 10.0}


def test_classification_without_flow_has_no_cash_flow_entry() -> None:
    table = ClassificationTable(
        {"Gift": Classification("Gift Income", "SOPL", "Other Income", 1, None)}
    )
    report = aggregate([tx("2024-01-01", "Gift", 20)], table)

    assert report.sopl == {"Other Income": 20.0}
    assert report.net_cash_flow == 0.0
    assert report.cash_balance == 20.0


def test_empty_injected_table_classifies_nothing() -> None:
    report = aggregate(SCENARIO_1, ClassificationTable({}))
    assert report.sopl == {}
    assert report.net_profit == 0.0


@pytest.mark.parametrize("bad_amount", [0, -10, "abc", None, math.nan, math.inf])
def test_malformed_amount_contributes_zero(bad_amount) -> None:
    records = [
        {"id": "ok", "date": "2024-01-05", "category": "Sales Revenue", "amount": 100},
        {
            "id": "bad",
            "date": "2024-01-06",
            "category": "Rent Expense",
            "amount": bad_amount,
        },
    ]

    report = aggregate(records)

    assert report.sopl == {"Revenue": 100.0}
    assert report.cash_balance == 100.0


def test_dataframe_input_is_accepted() -> None:
    df = pd.DataFrame(
        [
            {"date": "2024-01-05", "category": "Sales Revenue", "amount": 1000.0},
            {"date": "2024-01-10", "category": "Rent Expense", "amount": 300.0},
        ]
    )
    assert aggregate(df).net_profit == 700.0


def test_input_collection_is_not_modified() -> None:
    records = list(SCENARIO_1)
    snapshot = list(records)
    aggregate(records)
    assert records == snapshot


def test_cash_rules() -> None:
    sale = Classification("Sales Revenue", "SOPL", "Revenue", 1, "Operating")
    rent = Classification("Rent Expense", "SOPL", "Operating Expenses", -1, "Operating")
    equipment = Classification(
        "Equipment", "SOFP", "Non-current Assets", 1, "Investing"
    )
    other_asset = Classification("Deposit", "SOFP", "Current Assets", 1, None)

    assert cash_movement(sale, 10) == 10
    assert cash_movement(rent, 10) == -10
    assert cash_movement(equipment, 10) == -10
    assert cash_movement(other_asset, 10) == 0.0

    assert cash_flow_amount(sale, 10) == 10
    assert cash_flow_amount(rent, 10) == -10
    assert cash_flow_amount(equipment, 10) == -10


def test_total_revenue_includes_other_income() -> None:
    report = aggregate(
        [
            tx("2024-01-05", "Sales Revenue", 1000),
            tx("2024-01-06", "Interest Received", 50),
        ]
    )
    assert report.total_revenue == 1050.0
