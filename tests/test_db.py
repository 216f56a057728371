import pytest

from smartbook.db import (
    DatabaseConfig,
    clear_transactions,
    count_transactions,
    delete_transaction,
    get_transaction_by_id,
    has_transactions,
    import_transactions,
    init_database,
    insert_transaction,
    load_transactions,
    update_transaction,
)
from smartbook.transactions import (
    NewTransaction,
    Transaction,
    TransactionNotFoundError,
    create_transaction,
)


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    db_path = tmp_path / "db" / "test_db.sqlite"
    return DatabaseConfig(engine="sqlite", path=db_path)


def make_tx(tx_id: str, tx_date: str = "2025-01-01", amount: float = 100.0):
    return Transaction(
        id=tx_id,
        date=tx_date,
        description=f"Transaction {tx_id}",
        category="Sales Revenue",
        amount=amount,
        timestamp="2025-01-01T00:00:00+00:00",
    )


def test_init_database_creates_file_and_schema(tmp_path):
    """init_database should create the SQLite file and an empty schema."""
    cfg = make_tmp_db_cfg(tmp_path)

    assert not cfg.path.exists()
    init_database(cfg)
    assert cfg.path.exists()

    # A freshly initialized database should not contain any transactions.
    assert has_transactions(cfg) is False
    assert count_transactions(cfg) == 0

    # Idempotent.
    init_database(cfg)


def test_unsupported_engine_raises(tmp_path):
    cfg = DatabaseConfig(engine="postgres", path=tmp_path / "x.sqlite")
    with pytest.raises(ValueError, match="Unsupported database engine"):
        init_database(cfg)


def test_insert_and_get_round_trip(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    tx = make_tx("t1", amount=1234.56)

    insert_transaction(cfg, tx)

    assert get_transaction_by_id(cfg, "t1") == tx
    assert get_transaction_by_id(cfg, "missing") is None


def test_amounts_are_stored_as_cents(tmp_path):
    """Amounts are reconstructed from integer cents."""
    cfg = make_tmp_db_cfg(tmp_path)
    insert_transaction(cfg, make_tx("t1", amount=0.1 + 0.2))

    assert get_transaction_by_id(cfg, "t1").amount == 0.3


def test_smallest_validated_amount_survives_storage(tmp_path):
    """A validated amount never reloads as zero."""
    cfg = make_tmp_db_cfg(tmp_path)
    tx = create_transaction(
        NewTransaction(
            date="2024-01-05",
            description="Tip",
            category="Sales Revenue",
            amount="0.006",
        )
    )
    insert_transaction(cfg, tx)

    (loaded,) = load_transactions(cfg)
    assert loaded.amount == 0.01


def test_sub_cent_amount_is_not_stored(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    with pytest.raises(ValueError, match="below one cent"):
        insert_transaction(cfg, make_tx("t1", amount=0.004))
    assert count_transactions(cfg) == 0

    insert_transaction(cfg, make_tx("t2", amount=5.0))
    with pytest.raises(ValueError, match="below one cent"):
        update_transaction(cfg, make_tx("t2", amount=0.004))
    assert get_transaction_by_id(cfg, "t2").amount == 5.0


def test_insert_duplicate_id_raises(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    insert_transaction(cfg, make_tx("t1"))
    with pytest.raises(ValueError, match="already exists"):
        insert_transaction(cfg, make_tx("t1"))


def test_load_transactions_ordered_by_date_then_insertion(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    insert_transaction(cfg, make_tx("late", "2025-03-01"))
    insert_transaction(cfg, make_tx("b", "2025-01-15"))
    insert_transaction(cfg, make_tx("a", "2025-01-15"))
    insert_transaction(cfg, make_tx("early", "2024-12-31"))

    ids = [t.id for t in load_transactions(cfg)]
    assert ids == ["early", "b", "a", "late"]

    bounded = load_transactions(cfg, start="2025-01-01", end="2025-01-31")
    assert [t.id for t in bounded] == ["b", "a"]


def test_update_transaction_keeps_id_and_timestamp(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    original = make_tx("t1")
    insert_transaction(cfg, original)

    changed = Transaction(
        id="t1",
        date="2025-02-02",
        description="Corrected",
        category="Rent Expense",
        amount=42.0,
        timestamp="ignored",
    )
    updated = update_transaction(cfg, changed)

    assert updated.date == "2025-02-02"
    assert updated.description == "Corrected"
    assert updated.category == "Rent Expense"
    assert updated.amount == 42.0
    assert updated.timestamp == original.timestamp


def test_update_and_delete_unknown_id_raise(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    init_database(cfg)

    with pytest.raises(TransactionNotFoundError):
        update_transaction(cfg, make_tx("ghost"))
    with pytest.raises(TransactionNotFoundError):
        delete_transaction(cfg, "ghost")


def test_delete_transaction(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    insert_transaction(cfg, make_tx("t1"))
    insert_transaction(cfg, make_tx("t2"))

    delete_transaction(cfg, "t1")

    assert [t.id for t in load_transactions(cfg)] == ["t2"]


def test_import_skips_ids_already_stored(tmp_path):
    """Re-importing the same ids should not create duplicates."""
    cfg = make_tmp_db_cfg(tmp_path)
    insert_transaction(cfg, make_tx("t1"))

    stats = import_transactions(
        cfg, [make_tx("t1"), make_tx("t2"), make_tx("t3"), make_tx("t2")]
    )

    assert stats.rows_inserted == 2
    assert stats.duplicates_skipped == 2
    assert count_transactions(cfg) == 3


def test_clear_transactions(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    import_transactions(cfg, [make_tx("t1"), make_tx("t2")])

    assert clear_transactions(cfg) == 2
    assert has_transactions(cfg) is False
