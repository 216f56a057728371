import pytest

from smartbook.classification import Classification, ClassificationTable
from smartbook.trends import monthly_trend


def rec(tx_date: str, category: str, amount: float) -> dict:
    return {"date": tx_date, "category": category, "amount": amount}


def test_two_months_of_revenue() -> None:
    trend = monthly_trend(
        [
            rec("2024-02-03", "Sales Revenue", 1500),
            rec("2024-01-10", "Sales Revenue", 1000),
        ]
    )

    assert trend.labels == ["2024-01", "2024-02"]
    assert trend.revenue == [1000.0, 1500.0]
    assert trend.expenses == [0.0, 0.0]
    assert trend.net_profit == [1000.0, 1500.0]


def test_expenses_are_positive_magnitudes() -> None:
    trend = monthly_trend(
        [
            rec("2024-01-05", "Sales Revenue", 1000),
            rec("2024-01-10", "Rent Expense", 300),
            rec("2024-01-12", "Utilities Expense", 50),
        ]
    )

    assert trend.revenue == [1000.0]
    assert trend.expenses == [350.0]
    assert trend.net_profit == [650.0]


def test_months_without_profit_or_loss_activity_are_absent() -> None:
    """Position-only months and unknown categories do not create labels."""
    trend = monthly_trend(
        [
            rec("2024-01-05", "Sales Revenue", 100),
            rec("2024-02-01", "Capital Injection", 5000),
            rec("2024-02-02", "Equipment Purchase", 700),
            rec("2024-03-10", "Mystery", 20),
            rec("2024-04-10", "Rent Expense", 30),
        ]
    )

    assert trend.labels == ["2024-01", "2024-04"]
    assert trend.revenue == [100.0, 0.0]
    assert trend.expenses == [0.0, 30.0]


def test_sign_of_each_transaction_decides_its_bucket() -> None:
    """Two categories on the same line item can land in different buckets."""
    table = ClassificationTable(
        {
            "Refund Given": Classification(
                "Sales Returns", "SOPL", "Revenue", -1, "Operating"
            ),
            "Sale": Classification("Sales", "SOPL", "Revenue", 1, "Operating"),
        }
    )

    trend = monthly_trend(
        [rec("2024-05-01", "Sale", 500), rec("2024-05-02", "Refund Given", 80)],
        table,
    )

    assert trend.revenue == [500.0]
    assert trend.expenses == [80.0]
    assert trend.net_profit == [420.0]


def test_empty_trend() -> None:
    trend = monthly_trend([])
    assert trend.is_empty
    assert trend.to_frame().empty
    assert list(trend.to_frame().columns) == [
        "month",
        "revenue",
        "expenses",
        "net_profit",
    ]


def test_malformed_amount_is_left_out() -> None:
    trend = monthly_trend(
        [rec("2024-01-05", "Sales Revenue", 100), rec("2024-01-06", "Rent Expense", -5)]
    )
    assert trend.net_profit == [pytest.approx(100.0)]
    assert trend.expenses == [0.0]
