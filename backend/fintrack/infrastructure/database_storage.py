"""Database Storage — TransactionStorage over async SQLAlchemy.

Invariants:
    - Same contract as MemStorage: None/False for absence, records as dataclasses
    - create_many_transactions inserts in one DB transaction and returns records
      in submitted order
    - Date columns are converted to/from "YYYY-MM-DD" at this boundary only
    - Timestamps read back without tzinfo (SQLite) are treated as UTC

Design Decisions:
    - One short-lived session per call via DatabaseSessionManager.session():
      failures roll back and surface as DatabaseError (503)
    - Filters pushed down to SQL WHERE clauses rather than scanning in Python
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Mapping, Sequence

from sqlalchemy import delete, select

from fintrack.core.domain_types import (
    TRANSACTION_INPUT_FIELDS, TRANSACTION_MUTABLE_FIELDS, USER_INPUT_FIELDS,
    Transaction, User, utc_now,
)
from fintrack.core.validate_transaction import parse_calendar_date
from fintrack.infrastructure.database import DatabaseSessionManager
from fintrack.models.transaction import TransactionModel
from fintrack.models.user import UserModel

logger = logging.getLogger(__name__)

_DATE_COLUMNS = ("date", "end_date", "next_due_date")


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _to_user(row: UserModel) -> User:
    return User(
        id=row.id,
        username=row.username,
        password=row.password,
        name=row.name,
        email=row.email,
        created_at=_aware(row.created_at),
    )


def _to_transaction(row: TransactionModel) -> Transaction:
    values = {name: getattr(row, name) for name in TRANSACTION_INPUT_FIELDS}
    for name in _DATE_COLUMNS:
        values[name] = _iso(values[name])
    return Transaction(
        id=row.id,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        **values,
    )


def _column_values(data: Mapping[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    values = {k: v for k, v in data.items() if k in allowed}
    for name in _DATE_COLUMNS:
        if values.get(name) is not None:
            values[name] = parse_calendar_date(values[name])
    return values


class DatabaseStorage:
    """SQL-backed implementation of TransactionStorage."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    # ─── Users ───────────────────────────────────────────────────

    async def create_user(self, data: Mapping[str, Any]) -> User:
        fields = {k: v for k, v in data.items() if k in USER_INPUT_FIELDS}
        async with self._manager.session() as db:
            row = UserModel(created_at=utc_now(), **fields)
            db.add(row)
            await db.commit()
            await db.refresh(row)
            user = _to_user(row)
        logger.info("User created", extra={"user_id": user.id})
        return user

    async def _get_user_where(self, clause) -> User | None:
        async with self._manager.session() as db:
            result = await db.execute(select(UserModel).where(clause))
            row = result.scalars().first()
            return _to_user(row) if row else None

    async def get_user(self, user_id: int) -> User | None:
        return await self._get_user_where(UserModel.id == user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return await self._get_user_where(UserModel.username == username)

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._get_user_where(UserModel.email == email)

    # ─── Transactions: writes ────────────────────────────────────

    async def create_transaction(self, data: Mapping[str, Any]) -> Transaction:
        created = await self.create_many_transactions([data])
        return created[0]

    async def create_many_transactions(
        self, items: Sequence[Mapping[str, Any]],
    ) -> list[Transaction]:
        async with self._manager.session() as db:
            rows = [
                TransactionModel(
                    created_at=utc_now(),
                    **_column_values(item, TRANSACTION_INPUT_FIELDS),
                )
                for item in items
            ]
            for row in rows:
                db.add(row)
                await db.flush()
            await db.commit()
            for row in rows:
                await db.refresh(row)
            return [_to_transaction(row) for row in rows]

    async def update_transaction(
        self, transaction_id: int, partial: Mapping[str, Any],
    ) -> Transaction | None:
        changes = _column_values(partial, TRANSACTION_MUTABLE_FIELDS)
        async with self._manager.session() as db:
            row = await db.get(TransactionModel, transaction_id)
            if row is None:
                return None
            for name, value in changes.items():
                setattr(row, name, value)
            row.updated_at = utc_now()
            await db.commit()
            await db.refresh(row)
            return _to_transaction(row)

    async def delete_transaction(self, transaction_id: int) -> bool:
        async with self._manager.session() as db:
            result = await db.execute(
                delete(TransactionModel).where(TransactionModel.id == transaction_id),
            )
            await db.commit()
            return result.rowcount > 0

    # ─── Transactions: reads ─────────────────────────────────────

    async def _select(self, *clauses) -> list[Transaction]:
        async with self._manager.session() as db:
            result = await db.execute(
                select(TransactionModel)
                .where(*clauses)
                .order_by(TransactionModel.id),
            )
            return [_to_transaction(row) for row in result.scalars().all()]

    async def get_transaction_by_id(self, transaction_id: int) -> Transaction | None:
        async with self._manager.session() as db:
            row = await db.get(TransactionModel, transaction_id)
            return _to_transaction(row) if row else None

    async def get_transactions(self, user_id: int) -> list[Transaction]:
        return await self._select(TransactionModel.user_id == user_id)

    async def get_transactions_by_date_range(
        self, user_id: int, start: date | datetime, end: date | datetime,
    ) -> list[Transaction]:
        lo = start.date() if isinstance(start, datetime) else start
        hi = end.date() if isinstance(end, datetime) else end
        return await self._select(
            TransactionModel.user_id == user_id,
            TransactionModel.date >= lo,
            TransactionModel.date <= hi,
        )

    async def get_transactions_by_category(
        self, user_id: int, category: str,
    ) -> list[Transaction]:
        return await self._select(
            TransactionModel.user_id == user_id,
            TransactionModel.category == category,
        )

    async def get_transactions_by_budget_month(
        self, user_id: int, month: int, year: int,
    ) -> list[Transaction]:
        return await self._select(
            TransactionModel.user_id == user_id,
            TransactionModel.budget_month == month,
            TransactionModel.budget_year == year,
        )

    async def get_transaction_by_import_hash(self, import_hash: str) -> Transaction | None:
        async with self._manager.session() as db:
            result = await db.execute(
                select(TransactionModel)
                .where(TransactionModel.import_hash == import_hash)
                .order_by(TransactionModel.id)
                .limit(1),
            )
            row = result.scalars().first()
            return _to_transaction(row) if row else None

    async def health_check(self) -> bool:
        return await self._manager.health_check()

    async def close(self) -> None:
        await self._manager.dispose()
