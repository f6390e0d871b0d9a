"""Transaction Schemas — camelCase wire models at the API boundary.

Invariants:
    - Wire keys are camelCase (paymentMethod, importHash); Python attributes are snake_case
    - TransactionInput is deliberately loose: field rules (description, date,
      amount, type) live in core.validate_transaction so their messages and
      order are controlled there, not by Pydantic; those fields are typed Any
      so Pydantic never coerces them first (JSON true is not the amount 1)
    - TransactionResponse never carries user_id

Design Decisions:
    - One input model for create and partial update: model_dump(exclude_unset=True)
      tells "absent" apart from explicit null
    - ImportRequest keeps rows untyped so a malformed row becomes
      "Invalid CSV data" instead of a generic request-shape error
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fintrack.core.domain_types import Transaction


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )


class TransactionInput(CamelModel):
    """Create / update payload — every field optional at the schema level."""
    description: Any = None
    date: Any = None
    amount: Any = None
    type: Any = None
    category: str | None = None
    subcategory: str | None = None
    payment_method: str | None = None
    is_recurring: bool | None = None
    frequency: str | None = None
    has_end_date: bool | None = None
    end_date: Any = None
    next_due_date: Any = None
    budget_month: int | None = None
    budget_year: int | None = None
    balance: Any = None
    reference: str | None = None
    notes: str | None = None
    import_hash: str | None = None


class TransactionResponse(CamelModel):
    """Public transaction shape."""
    id: int
    date: str
    description: str
    amount: str
    category: str
    subcategory: str | None = None
    type: str
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
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, txn: Transaction) -> "TransactionResponse":
        data = asdict(txn)
        data.pop("user_id", None)
        return cls(**data)


class ImportRequest(BaseModel):
    transactions: list[Any]


class ImportResult(BaseModel):
    imported: int
    skipped: int
