from datetime import date

import pytest

import smartbook.periods as periods


def rec(tx_id: str, tx_date) -> dict:
    return {"id": tx_id, "date": tx_date, "category": "Sales Revenue", "amount": 1.0}


def test_month_end_and_next_month_boundaries() -> None:
    """A late-February date is in both slices; early March is excluded."""
    transactions = [rec("feb", "2024-02-28"), rec("mar", "2024-03-01")]

    sel = periods.select_period(transactions, "2024-02")

    assert [t["id"] for t in sel.period] == ["feb"]
    assert [t["id"] for t in sel.cumulative] == ["feb"]


def test_cumulative_slice_includes_prior_months() -> None:
    transactions = [
        rec("dec", "2023-12-31"),
        rec("jan", "2024-01-15"),
        rec("feb1", "2024-02-01"),
        rec("feb29", "2024-02-29"),
        rec("apr", "2024-04-01"),
    ]

    sel = periods.select_period(transactions, "2024-02")

    assert [t["id"] for t in sel.period] == ["feb1", "feb29"]
    assert [t["id"] for t in sel.cumulative] == ["dec", "jan", "feb1", "feb29"]
    assert sel.has_data


def test_upper_bound_is_not_calendar_aware() -> None:
    """The '-31' bound admits any day string of the month, even invalid ones."""
    assert periods.cumulative_upper_bound("2024-02") == "2024-02-31"

    sel = periods.select_period([rec("odd", "2024-02-30")], "2024-02")
    assert [t["id"] for t in sel.cumulative] == ["odd"]


def test_empty_selection_has_no_data() -> None:
    sel = periods.select_period([rec("later", "2025-01-01")], "2024-06")
    assert sel.period == []
    assert sel.cumulative == []
    assert not sel.has_data


def test_date_objects_are_compared_as_iso_strings() -> None:
    sel = periods.select_period([rec("d", date(2024, 2, 10))], "2024-02")
    assert len(sel.period) == 1
    assert len(sel.cumulative) == 1


@pytest.mark.parametrize("month", ["2024-13", "2024-1", "24-01", "2024/01", "", None])
def test_invalid_month_raises(month) -> None:
    with pytest.raises(ValueError, match="expected YYYY-MM"):
        periods.select_period([], month)


def test_current_month_uses_today(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 3, 14))
    assert periods.current_month() == "2025-03"


def test_month_helpers() -> None:
    assert periods.month_of("2024-07-04") == "2024-07"
    assert periods.format_month_label("2024-01") == "January 2024"
    assert periods.format_month_label("") == "No period selected"
