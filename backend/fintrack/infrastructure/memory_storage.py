"""In-Memory Storage — process-local user and transaction tables.

Invariants:
    - One MemStorage per process, owned by app.state (no module-level tables)
    - ids come from per-table counters and are never reused
    - Mutations run under a single asyncio.Lock: no interleaving between the
      counter bump and the table write
    - Records handed out are copies; callers change state only through methods
    - Absence is reported as None / False, never as an exception

Design Decisions:
    - dict[id, record] tables: O(1) id lookups, insertion-ordered iteration
    - Filters scan the table: fine for the single-user volumes this store targets
"""

import asyncio
import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from fintrack.core.domain_types import (
    TRANSACTION_INPUT_FIELDS, TRANSACTION_MUTABLE_FIELDS, USER_INPUT_FIELDS,
    Transaction, User, utc_now,
)
from fintrack.core.validate_transaction import parse_calendar_date

logger = logging.getLogger(__name__)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


class MemStorage:
    """Dict-backed implementation of TransactionStorage."""

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._transactions: dict[int, Transaction] = {}
        self._next_user_id = 1
        self._next_transaction_id = 1
        self._lock = asyncio.Lock()

    # ─── Users ───────────────────────────────────────────────────

    async def create_user(self, data: Mapping[str, Any]) -> User:
        fields = {k: v for k, v in data.items() if k in USER_INPUT_FIELDS}
        async with self._lock:
            user = User(id=self._next_user_id, created_at=utc_now(), **fields)
            self._users[user.id] = user
            self._next_user_id += 1
        logger.info("User created", extra={"user_id": user.id})
        return replace(user)

    async def get_user(self, user_id: int) -> User | None:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def get_user_by_username(self, username: str) -> User | None:
        for user in self._users.values():
            if user.username == username:
                return replace(user)
        return None

    async def get_user_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email == email:
                return replace(user)
        return None

    # ─── Transactions: writes ────────────────────────────────────

    def _insert(self, data: Mapping[str, Any]) -> Transaction:
        """Caller must hold the lock."""
        fields = {k: v for k, v in data.items() if k in TRANSACTION_INPUT_FIELDS}
        txn = Transaction(
            id=self._next_transaction_id, created_at=utc_now(), **fields,
        )
        self._transactions[txn.id] = txn
        self._next_transaction_id += 1
        return txn

    async def create_transaction(self, data: Mapping[str, Any]) -> Transaction:
        async with self._lock:
            txn = self._insert(data)
        return replace(txn)

    async def create_many_transactions(
        self, items: Sequence[Mapping[str, Any]],
    ) -> list[Transaction]:
        async with self._lock:
            created = [self._insert(item) for item in items]
        logger.info(f"Inserted {len(created)} transactions in batch")
        return [replace(txn) for txn in created]

    async def update_transaction(
        self, transaction_id: int, partial: Mapping[str, Any],
    ) -> Transaction | None:
        changes = {k: v for k, v in partial.items() if k in TRANSACTION_MUTABLE_FIELDS}
        async with self._lock:
            existing = self._transactions.get(transaction_id)
            if existing is None:
                return None
            merged = replace(existing, **changes, updated_at=utc_now())
            self._transactions[transaction_id] = merged
        return replace(merged)

    async def delete_transaction(self, transaction_id: int) -> bool:
        async with self._lock:
            return self._transactions.pop(transaction_id, None) is not None

    # ─── Transactions: reads ─────────────────────────────────────

    async def get_transaction_by_id(self, transaction_id: int) -> Transaction | None:
        txn = self._transactions.get(transaction_id)
        return replace(txn) if txn else None

    def _owned_by(self, user_id: int) -> list[Transaction]:
        return [t for t in self._transactions.values() if t.user_id == user_id]

    async def get_transactions(self, user_id: int) -> list[Transaction]:
        return [replace(t) for t in self._owned_by(user_id)]

    async def get_transactions_by_date_range(
        self, user_id: int, start: date | datetime, end: date | datetime,
    ) -> list[Transaction]:
        lo, hi = _as_date(start), _as_date(end)
        result = []
        for txn in self._owned_by(user_id):
            txn_date = parse_calendar_date(txn.date)
            if txn_date is not None and lo <= txn_date <= hi:
                result.append(replace(txn))
        return result

    async def get_transactions_by_category(
        self, user_id: int, category: str,
    ) -> list[Transaction]:
        return [replace(t) for t in self._owned_by(user_id) if t.category == category]

    async def get_transactions_by_budget_month(
        self, user_id: int, month: int, year: int,
    ) -> list[Transaction]:
        return [
            replace(t) for t in self._owned_by(user_id)
            if t.budget_month == month and t.budget_year == year
        ]

    async def get_transaction_by_import_hash(self, import_hash: str) -> Transaction | None:
        for txn in self._transactions.values():
            if txn.import_hash == import_hash:
                return replace(txn)
        return None

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass
