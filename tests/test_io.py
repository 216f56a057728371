import json
from datetime import date

import pytest

from smartbook.io import default_backup_name, read_transactions, write_transactions_json
from smartbook.transactions import Transaction


def write_json(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_read_json_backup_filters_invalid_records(tmp_path):
    path = tmp_path / "backup.json"
    write_json(
        path,
        [
            {
                "id": "keep-1",
                "date": "2024-01-05",
                "description": "Sale",
                "category": "Sales Revenue",
                "amount": 1000,
                "timestamp": "2024-01-05T10:00:00Z",
            },
            {
                "date": "2024-01-06",
                "description": "Rent",
                "category": "Rent Expense",
                "amount": "300.50",
            },
            # Blank description
            {"date": "2024-01-07", "description": "", "category": "X", "amount": 10},
            # Non-numeric amount
            {"date": "2024-01-08", "description": "A", "category": "X", "amount": "?"},
            # Non-positive amount
            {"date": "2024-01-09", "description": "B", "category": "X", "amount": -5},
            "not a record",
        ],
    )

    transactions = read_transactions(path)

    assert len(transactions) == 2
    first, second = transactions
    assert first.id == "keep-1"
    assert first.timestamp == "2024-01-05T10:00:00Z"
    assert second.amount == 300.5
    # Missing ids and timestamps are generated.
    assert second.id
    assert second.timestamp


def test_read_json_skips_boolean_and_sub_cent_amounts(tmp_path):
    path = tmp_path / "backup.json"
    record = {"date": "2024-01-05", "description": "Sale", "category": "Sales Revenue"}
    write_json(
        path,
        [
            {**record, "id": "flag", "amount": True},
            {**record, "id": "dust", "amount": 0.004},
            {**record, "id": "real", "amount": 12},
        ],
    )

    assert [t.id for t in read_transactions(path)] == ["real"]


def test_read_json_rejects_non_array(tmp_path):
    path = tmp_path / "backup.json"
    write_json(path, {"transactions": []})
    with pytest.raises(ValueError, match="expected an array"):
        read_transactions(path)


def test_read_json_rejects_invalid_json(tmp_path):
    path = tmp_path / "backup.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to parse JSON"):
        read_transactions(path)


def test_read_json_without_valid_records_raises(tmp_path):
    path = tmp_path / "backup.json"
    write_json(path, [{"date": "2024-01-01"}])
    with pytest.raises(ValueError, match="No valid transactions"):
        read_transactions(path)


def test_read_csv_with_label_alias(tmp_path):
    path = tmp_path / "transactions.csv"
    path.write_text(
        "Date,Label,Category,Amount\n"
        "2024-02-01,Counter sale,Sales Revenue,250\n"
        "2024-02-02,Electricity,Utilities Expense,80.25\n",
        encoding="utf-8",
    )

    transactions = read_transactions(path)

    assert [t.description for t in transactions] == ["Counter sale", "Electricity"]
    assert [t.amount for t in transactions] == [250.0, 80.25]


def test_read_csv_missing_columns_raises(tmp_path):
    path = tmp_path / "transactions.csv"
    path.write_text("date,amount\n2024-01-01,5\n", encoding="utf-8")
    with pytest.raises(ValueError, match="missing required column"):
        read_transactions(path)


def test_unsupported_extension_and_missing_file(tmp_path):
    path = tmp_path / "backup.txt"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported file type"):
        read_transactions(path)
    with pytest.raises(FileNotFoundError):
        read_transactions(tmp_path / "missing.json")


def test_write_then_read_preserves_records(tmp_path):
    transactions = [
        Transaction("a", "2024-01-05", "Sale", "Sales Revenue", 10.5, "ts-a"),
        Transaction("b", "2024-01-06", "Rent", "Rent Expense", 3.0, "ts-b"),
    ]
    path = write_transactions_json(transactions, tmp_path / "out" / "backup.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload[0] == {
        "id": "a",
        "date": "2024-01-05",
        "description": "Sale",
        "category": "Sales Revenue",
        "amount": 10.5,
        "timestamp": "ts-a",
    }
    assert read_transactions(path) == transactions


def test_default_backup_name():
    assert default_backup_name(date(2024, 5, 17)) == "smartbook-backup-2024-05-17.json"
