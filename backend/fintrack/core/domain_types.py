"""Domain Types — records owned by storage and the principal threaded through requests.

Invariants:
    - Ids are plain ints assigned by storage, never by callers
    - TransactionType is the closed set {income, expense}
    - Transaction.date / end_date / next_due_date are ISO "YYYY-MM-DD" strings
    - Transaction.amount / balance are decimal strings (formatting preserved as given)

Design Decisions:
    - dataclasses for records: equality by value makes store round-trips easy to assert
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class TransactionType(str, Enum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


DEFAULT_CATEGORY = "Uncategorized"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ─── Records ─────────────────────────────────────────────────────

@dataclass
class Principal:
    """Authenticated identity attached to a request."""
    id: int
    username: str | None = None


@dataclass
class User:
    id: int
    username: str
    password: str
    name: str
    email: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Transaction:
    id: int
    user_id: int
    date: str
    description: str
    amount: str
    category: str
    type: str
    subcategory: str | None = None
    payment_method: str | None = None
    is_recurring: bool | None = None
    frequency: str | None = None
    has_end_date: bool | None = None
    end_date: str | None = None
    next_due_date: str | None = None
    budget_month: int | None = None
    budget_year: int | None = None
    balance: str | None = None
    reference: str | None = None
    notes: str | None = None
    import_hash: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None


# Fields a caller may supply on create; id and timestamps belong to storage.
TRANSACTION_INPUT_FIELDS = frozenset(
    f.name for f in fields(Transaction)
    if f.name not in ("id", "created_at", "updated_at")
)

# Fields a partial update may touch; ownership is immutable.
TRANSACTION_MUTABLE_FIELDS = TRANSACTION_INPUT_FIELDS - {"user_id"}

USER_INPUT_FIELDS = frozenset(("username", "password", "name", "email"))
