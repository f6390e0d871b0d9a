"""Transaction ORM — one income or expense line owned by a user.

Invariants:
    - user_id FK → users.id (CASCADE delete)
    - date / end_date / next_due_date are DATE columns: range filters compare
      real dates, not strings
    - amount / balance are stored as the caller's decimal string
    - import_hash is indexed (not unique): dedup is decided by the import route

Design Decisions:
    - String amounts over NUMERIC: "100.00" round-trips byte-for-byte
"""

import datetime as dt

from sqlalchemy import (
    String, Text, Integer, Boolean, Date, DateTime, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.db.base import Base


class TransactionModel(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[str] = mapped_column(String(40), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    subcategory: Mapped[str | None] = mapped_column(String(100), nullable=True)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_recurring: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(20), nullable=True)
    has_end_date: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    next_due_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    budget_month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    budget_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    balance: Mapped[str | None] = mapped_column(String(40), nullable=True)
    reference: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    import_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: dt.datetime.now(dt.timezone.utc),
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    user: Mapped["UserModel"] = relationship(
        "UserModel", back_populates="transactions", lazy="noload",
    )
