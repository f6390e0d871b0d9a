"""API test fixtures — FastAPI app over a mocked or real storage.

Invariants:
    - Every test gets a fresh app instance (no shared dependency overrides)
    - mock_storage is autospecced from MemStorage: misspelled methods fail loudly
    - `client` is authenticated as user 1 via a dependency override
    - `live_client` runs against a real MemStorage and real Basic auth

Design Decisions:
    - Mocked storage for route tests: lets tests assert a storage method was
      (or was not) awaited, which is the contract for validation failures
"""

from datetime import datetime, timezone
from unittest.mock import create_autospec

import pytest
from httpx import ASGITransport, AsyncClient

from fintrack.api.dependencies import get_current_principal
from fintrack.core.domain_types import Principal, Transaction
from fintrack.infrastructure.memory_storage import MemStorage
from fintrack.main import create_app


def _make_transaction(**overrides) -> Transaction:
    data = {
        "id": 1,
        "user_id": 1,
        "date": "2023-06-15",
        "description": "Complete Transaction",
        "amount": "100.00",
        "category": "Income",
        "type": "income",
        "created_at": datetime(2023, 6, 15, 10, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Transaction(**data)


@pytest.fixture
def mock_storage():
    storage = create_autospec(MemStorage, instance=True)
    storage.get_user.return_value = None
    storage.get_user_by_username.return_value = None
    storage.get_user_by_email.return_value = None
    storage.get_transactions.return_value = []
    storage.get_transaction_by_id.return_value = None
    storage.create_many_transactions.return_value = []
    storage.update_transaction.return_value = None
    storage.delete_transaction.return_value = True
    storage.get_transactions_by_date_range.return_value = []
    storage.get_transactions_by_category.return_value = []
    storage.get_transactions_by_budget_month.return_value = []
    storage.get_transaction_by_import_hash.return_value = None
    storage.health_check.return_value = True
    return storage


@pytest.fixture
def app(mock_storage):
    return create_app(storage=mock_storage)


@pytest.fixture
async def anonymous_client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def client(app):
    """Client whose requests are authenticated as user 1."""
    app.dependency_overrides[get_current_principal] = lambda: Principal(id=1, username="user1")
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def mem_storage():
    return MemStorage()


@pytest.fixture
async def live_client(mem_storage):
    live_app = create_app(storage=mem_storage)
    async with AsyncClient(
        transport=ASGITransport(app=live_app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def make_transaction():
    """Factory for stored Transaction records returned by the mock storage."""
    return _make_transaction
