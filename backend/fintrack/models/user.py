"""User ORM — account rows that own transactions.

Invariants:
    - id is an autoincrement integer primary key
    - username and email are unique at the table level
    - password holds the scrypt "<hash>.<salt>" string, never plaintext from the API
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.db.base import Base


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    transactions: Mapped[list["TransactionModel"]] = relationship(
        "TransactionModel", back_populates="user",
        cascade="all, delete-orphan", lazy="noload",
    )
