"""Batch Import — tests for all-or-nothing validation and duplicate partitioning."""

import pytest

from fintrack.core.errors import TransactionValidationError
from fintrack.core.import_batch import (
    ImportPlan,
    import_hashes,
    partition_duplicates,
    prepare_import_batch,
)


def _row(**overrides) -> dict:
    row = {"date": "2023-06-15", "description": "Coffee", "amount": "-3.50"}
    row.update(overrides)
    return row


def test_prepare_import_batch_infers_type_and_category():
    [item] = prepare_import_batch([_row()], user_id=1)
    assert item["type"] == "expense"
    assert item["category"] == "Uncategorized"
    assert item["user_id"] == 1


def test_one_bad_row_rejects_the_batch():
    rows = [_row(), {"date": "2023-06-15", "description": "Missing Amount"}]
    with pytest.raises(TransactionValidationError) as exc:
        prepare_import_batch(rows, user_id=1)
    assert exc.value.message == "Invalid CSV data"
    assert exc.value.field == "transactions[1].amount"


def test_explicit_invalid_type_still_rejected():
    with pytest.raises(TransactionValidationError, match="Invalid CSV data"):
        prepare_import_batch([_row(type="transfer")], user_id=1)


def test_import_hashes_are_distinct_and_ordered():
    items = [
        {"import_hash": "b"}, {"import_hash": None},
        {"import_hash": "a"}, {"import_hash": "b"},
    ]
    assert import_hashes(items) == ["b", "a"]


def test_partition_skips_existing_hashes():
    items = [{"import_hash": "existing-hash"}, {"import_hash": "new"}]
    plan = partition_duplicates(items, {"existing-hash"})
    assert plan.skipped == 1
    assert plan.to_insert == [{"import_hash": "new"}]


def test_partition_skips_repeats_within_batch():
    items = [{"import_hash": "h", "n": 1}, {"import_hash": "h", "n": 2}]
    plan = partition_duplicates(items, set())
    assert plan.to_insert == [{"import_hash": "h", "n": 1}]
    assert plan.skipped == 1


def test_rows_without_hash_always_inserted():
    items = [{"import_hash": None}, {}]
    assert partition_duplicates(items, {"x"}) == ImportPlan(to_insert=items, skipped=0)
