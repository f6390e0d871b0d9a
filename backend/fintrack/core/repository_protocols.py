"""Boundary Protocols — the storage contract route handlers depend on.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - Lookups return None for absence; they never raise domain errors
    - Ownership is NOT enforced here; callers authorize against Transaction.user_id
    - create_many_transactions returns records in submitted order

Design Decisions:
    - Protocol over ABC: MemStorage and DatabaseStorage satisfy it structurally
    - Async in Protocol: the database implementation does IO; the in-memory one
      keeps the same shape so the two are interchangeable behind get_storage
"""

from datetime import date
from typing import Any, Mapping, Protocol, Sequence

from fintrack.core.domain_types import Transaction, User


class UserRepository(Protocol):
    """Contract for user persistence."""
    async def create_user(self, data: Mapping[str, Any]) -> User: ...
    async def get_user(self, user_id: int) -> User | None: ...
    async def get_user_by_username(self, username: str) -> User | None: ...
    async def get_user_by_email(self, email: str) -> User | None: ...


class TransactionRepository(Protocol):
    """Contract for transaction persistence and filtering."""
    async def create_transaction(self, data: Mapping[str, Any]) -> Transaction: ...
    async def create_many_transactions(
        self, items: Sequence[Mapping[str, Any]],
    ) -> list[Transaction]: ...
    async def get_transaction_by_id(self, transaction_id: int) -> Transaction | None: ...
    async def get_transactions(self, user_id: int) -> list[Transaction]: ...
    async def update_transaction(
        self, transaction_id: int, partial: Mapping[str, Any],
    ) -> Transaction | None: ...
    async def delete_transaction(self, transaction_id: int) -> bool: ...
    async def get_transactions_by_date_range(
        self, user_id: int, start: date, end: date,
    ) -> list[Transaction]: ...
    async def get_transactions_by_category(
        self, user_id: int, category: str,
    ) -> list[Transaction]: ...
    async def get_transactions_by_budget_month(
        self, user_id: int, month: int, year: int,
    ) -> list[Transaction]: ...
    async def get_transaction_by_import_hash(
        self, import_hash: str,
    ) -> Transaction | None: ...


class TransactionStorage(UserRepository, TransactionRepository, Protocol):
    """Full storage surface handed to the API layer."""
    async def health_check(self) -> bool: ...
    async def close(self) -> None: ...
