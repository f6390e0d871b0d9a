"""MemStorage — user and transaction persistence, filters, batch and partial updates.

Invariants:
    - Lookups for unknown ids/names return None, never raise
    - Batch insert preserves submission order and assigns distinct, increasing ids
    - update_transaction merges only the supplied keys and stamps updated_at
    - Date range filter is inclusive and compares real dates
"""

import asyncio
from datetime import date, datetime

import pytest

from fintrack.core.domain_types import Transaction, User
from fintrack.infrastructure.memory_storage import MemStorage


@pytest.fixture
def storage():
    return MemStorage()


@pytest.fixture
async def user_id(storage):
    user = await storage.create_user({
        "username": "transactionuser",
        "password": "password",
        "name": "Transaction User",
        "email": "transactions@example.com",
    })
    return user.id


def _txn(user_id: int, **overrides) -> dict:
    data = {
        "user_id": user_id,
        "date": "2023-06-15",
        "description": "Test Transaction",
        "amount": "100.00",
        "category": "Income",
        "subcategory": "Salary",
        "type": "income",
        "payment_method": "Bank Transfer",
        "is_recurring": False,
        "budget_month": None,
        "balance": None,
        "reference": None,
        "notes": None,
        "import_hash": None,
    }
    data.update(overrides)
    return data


# ─── Users ───────────────────────────────────────────────────────

async def test_creates_and_retrieves_a_user(storage):
    user_input = {
        "username": "testuser",
        "password": "password123",
        "name": "Test User",
        "email": "test@example.com",
    }
    created = await storage.create_user(user_input)

    assert isinstance(created, User)
    assert isinstance(created.id, int)
    assert created.username == "testuser"
    assert created.name == "Test User"
    assert created.email == "test@example.com"
    assert created.password == "password123"
    assert isinstance(created.created_at, datetime)

    assert await storage.get_user(created.id) == created
    assert await storage.get_user_by_username("testuser") == created
    assert await storage.get_user_by_email("test@example.com") == created


async def test_returns_none_for_non_existent_user(storage):
    assert await storage.get_user(999) is None
    assert await storage.get_user_by_username("nonexistent") is None
    assert await storage.get_user_by_email("nonexistent@example.com") is None


async def test_user_ids_are_sequential(storage):
    a = await storage.create_user({"username": "a", "password": "p", "name": "A", "email": "a@x"})
    b = await storage.create_user({"username": "b", "password": "p", "name": "B", "email": "b@x"})
    assert b.id == a.id + 1


async def test_returned_records_are_copies(storage, user_id):
    user = await storage.get_user(user_id)
    user.name = "Mutated"
    assert (await storage.get_user(user_id)).name == "Transaction User"


# ─── Transactions ────────────────────────────────────────────────

async def test_creates_and_retrieves_a_transaction(storage, user_id):
    created = await storage.create_transaction(_txn(user_id))

    assert isinstance(created, Transaction)
    assert created.user_id == user_id
    assert created.description == "Test Transaction"
    assert created.amount == "100.00"
    assert created.category == "Income"
    assert isinstance(created.created_at, datetime)
    assert created.updated_at is None

    assert await storage.get_transaction_by_id(created.id) == created
    all_txns = await storage.get_transactions(user_id)
    assert all_txns == [created]


async def test_get_transaction_by_id_does_not_filter_by_owner(storage, user_id):
    created = await storage.create_transaction(_txn(user_id + 1))
    assert (await storage.get_transaction_by_id(created.id)).user_id == user_id + 1
    assert await storage.get_transactions(user_id) == []


async def test_unknown_transaction_id_returns_none(storage):
    assert await storage.get_transaction_by_id(999) is None
    assert await storage.update_transaction(999, {"description": "X"}) is None
    assert await storage.delete_transaction(999) is False


async def test_creates_multiple_transactions_in_batch(storage, user_id):
    created = await storage.create_many_transactions([
        _txn(user_id, description="Transaction 1", import_hash="hash1"),
        _txn(user_id, description="Transaction 2", amount="-50.00",
             category="Essentials", type="expense", import_hash="hash2"),
    ])

    assert [t.description for t in created] == ["Transaction 1", "Transaction 2"]
    assert created[0].id < created[1].id
    assert len(await storage.get_transactions(user_id)) == 2


async def test_concurrent_creates_get_distinct_ids(storage, user_id):
    results = await asyncio.gather(*(
        storage.create_transaction(_txn(user_id, description=f"T{i}"))
        for i in range(20)
    ))
    ids = [t.id for t in results]
    assert len(set(ids)) == 20


async def test_updates_a_transaction(storage, user_id):
    txn = await storage.create_transaction(_txn(user_id, description="Original Description"))

    updated = await storage.update_transaction(txn.id, {
        "description": "Updated Description",
        "amount": "150.00",
    })

    assert updated.id == txn.id
    assert updated.description == "Updated Description"
    assert updated.amount == "150.00"
    assert updated.category == "Income"
    assert isinstance(updated.updated_at, datetime)

    retrieved = await storage.get_transaction_by_id(txn.id)
    assert retrieved.description == "Updated Description"
    assert retrieved.amount == "150.00"


async def test_update_preserves_every_other_field(storage, user_id):
    txn = await storage.create_transaction(_txn(user_id, notes="keep me", budget_month=6, budget_year=2023))

    await storage.update_transaction(txn.id, {"description": "X"})
    after = await storage.get_transaction_by_id(txn.id)

    assert after.description == "X"
    expected = {k: v for k, v in vars(txn).items() if k not in ("description", "updated_at")}
    actual = {k: v for k, v in vars(after).items() if k not in ("description", "updated_at")}
    assert actual == expected


async def test_update_applies_explicit_none(storage, user_id):
    txn = await storage.create_transaction(_txn(user_id, notes="note"))
    updated = await storage.update_transaction(txn.id, {"notes": None})
    assert updated.notes is None


async def test_update_cannot_change_id_or_owner(storage, user_id):
    txn = await storage.create_transaction(_txn(user_id))
    updated = await storage.update_transaction(txn.id, {"id": 500, "user_id": 42})
    assert updated.id == txn.id
    assert updated.user_id == user_id


async def test_deletes_a_transaction(storage, user_id):
    txn = await storage.create_transaction(_txn(user_id, description="To Be Deleted"))
    assert await storage.get_transaction_by_id(txn.id) is not None

    assert await storage.delete_transaction(txn.id) is True
    assert await storage.get_transaction_by_id(txn.id) is None
    assert await storage.delete_transaction(txn.id) is False


async def test_ids_are_not_reused_after_delete(storage, user_id):
    first = await storage.create_transaction(_txn(user_id))
    await storage.delete_transaction(first.id)
    second = await storage.create_transaction(_txn(user_id))
    assert second.id > first.id


async def test_filters_transactions_by_date_range(storage, user_id):
    await storage.create_many_transactions([
        _txn(user_id, date="2023-01-01", description="January Transaction"),
        _txn(user_id, date="2023-02-15", description="February Transaction"),
        _txn(user_id, date="2023-03-20", description="March Transaction"),
    ])

    txns = await storage.get_transactions_by_date_range(
        user_id, date(2023, 1, 15), date(2023, 3, 1),
    )

    assert [t.description for t in txns] == ["February Transaction"]


async def test_date_range_is_inclusive_and_accepts_datetimes(storage, user_id):
    await storage.create_many_transactions([
        _txn(user_id, date="2023-01-15", description="start"),
        _txn(user_id, date="2023-03-01", description="end"),
    ])
    txns = await storage.get_transactions_by_date_range(
        user_id, datetime(2023, 1, 15, 12, 0), datetime(2023, 3, 1, 0, 0),
    )
    assert {t.description for t in txns} == {"start", "end"}


async def test_date_range_is_scoped_to_user(storage, user_id):
    await storage.create_transaction(_txn(user_id + 1, date="2023-02-15"))
    assert await storage.get_transactions_by_date_range(
        user_id, date(2023, 1, 1), date(2023, 12, 31),
    ) == []


async def test_filters_transactions_by_category(storage, user_id):
    await storage.create_many_transactions([
        _txn(user_id, description="Salary", category="Income"),
        _txn(user_id, description="Groceries", category="Essentials", type="expense"),
        _txn(user_id, description="Restaurant", category="Lifestyle", type="expense"),
    ])

    txns = await storage.get_transactions_by_category(user_id, "Essentials")
    assert [t.description for t in txns] == ["Groceries"]
    assert await storage.get_transactions_by_category(user_id, "essentials") == []


async def test_filters_transactions_by_budget_month(storage, user_id):
    await storage.create_many_transactions([
        _txn(user_id, description="June", budget_month=6, budget_year=2023),
        _txn(user_id, description="June next year", budget_month=6, budget_year=2024),
        _txn(user_id, description="July", budget_month=7, budget_year=2023),
    ])

    txns = await storage.get_transactions_by_budget_month(user_id, 6, 2023)
    assert [t.description for t in txns] == ["June"]


async def test_gets_transaction_by_import_hash(storage, user_id):
    await storage.create_transaction(
        _txn(user_id, description="Imported Transaction", import_hash="unique-import-hash"),
    )

    txn = await storage.get_transaction_by_import_hash("unique-import-hash")
    assert txn.description == "Imported Transaction"
    assert txn.import_hash == "unique-import-hash"
    assert await storage.get_transaction_by_import_hash("missing") is None


async def test_import_hash_lookup_is_global(storage, user_id):
    await storage.create_transaction(_txn(user_id + 5, import_hash="shared"))
    assert (await storage.get_transaction_by_import_hash("shared")).user_id == user_id + 5


# ─── Recurring transactions ──────────────────────────────────────

async def test_recurring_transaction_without_end_date(storage, user_id):
    created = await storage.create_transaction(_txn(
        user_id, description="Monthly Rent", amount="-1200.00",
        category="Essentials", subcategory="Housing", type="expense",
        is_recurring=True, frequency="monthly", has_end_date=False,
        end_date=None, next_due_date="2023-07-15",
        budget_month=6, budget_year=2023, notes="Recurring monthly rent payment",
    ))

    assert created.is_recurring is True
    assert created.frequency == "monthly"
    assert created.has_end_date is False
    assert created.end_date is None
    assert created.next_due_date == "2023-07-15"
    assert await storage.get_transaction_by_id(created.id) == created


async def test_recurring_transaction_with_end_date(storage, user_id):
    created = await storage.create_transaction(_txn(
        user_id, description="Gym Membership", amount="-50.00",
        is_recurring=True, frequency="monthly", has_end_date=True,
        end_date="2023-12-15", next_due_date="2023-07-15",
    ))

    assert created.has_end_date is True
    assert created.end_date == "2023-12-15"
    assert await storage.get_transaction_by_id(created.id) == created


async def test_updates_a_recurring_transaction(storage, user_id):
    txn = await storage.create_transaction(_txn(
        user_id, description="Original Subscription", amount="-10.00",
        is_recurring=True, frequency="monthly", has_end_date=False,
        next_due_date="2023-07-15",
    ))

    updated = await storage.update_transaction(txn.id, {
        "description": "Updated Subscription",
        "amount": "-15.00",
        "has_end_date": True,
        "end_date": "2024-06-15",
        "frequency": "quarterly",
    })

    assert updated.is_recurring is True
    assert updated.frequency == "quarterly"
    assert updated.has_end_date is True
    assert updated.end_date == "2024-06-15"
    retrieved = await storage.get_transaction_by_id(txn.id)
    assert retrieved.frequency == "quarterly"
    assert retrieved.end_date == "2024-06-15"
