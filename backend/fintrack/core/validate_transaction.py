"""Transaction Validation — field checks and coercion before anything reaches storage.

Invariants:
    - All functions are PURE: no IO, no async, no storage access
    - check_* return an error message on violation, None on success
    - validate_transaction_fields chains the checks in a fixed order — first error wins:
      description, date, amount, type
    - prepare_* raise TransactionValidationError carrying that first message
    - Stored dates are normalized to "YYYY-MM-DD"; amounts keep the caller's formatting

Design Decisions:
    - Messages are lowercase fragments ("invalid amount") so clients can match on them
    - Decimal over float for amount parsing: "100.00" is accepted without precision games
    - Budget month/year default to the transaction date when the caller omits them
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from fintrack.core.domain_types import (
    DEFAULT_CATEGORY, TRANSACTION_MUTABLE_FIELDS, TransactionType,
)
from fintrack.core.errors import TransactionValidationError

MSG_DESCRIPTION_REQUIRED = "description is required"
MSG_INVALID_DATE = "invalid date format"
MSG_INVALID_AMOUNT = "invalid amount"
MSG_INVALID_TYPE = "invalid transaction type"
MSG_INVALID_BUDGET_MONTH = "invalid budget month"

_FALLBACK_DATE_FORMATS = ("%Y/%m/%d", "%m/%d/%Y")
_VALID_TYPES = {t.value for t in TransactionType}


# ─── Parsers ─────────────────────────────────────────────────────

def parse_calendar_date(value: Any) -> date | None:
    """Parse an ISO date/datetime string (or date object) into a date, else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_amount(value: Any) -> str | None:
    """Return the amount as a decimal string, or None when it is not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip()
    else:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return text


# ─── Checks ──────────────────────────────────────────────────────

def check_description(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return MSG_DESCRIPTION_REQUIRED
    return None


def check_date(value: Any) -> str | None:
    if parse_calendar_date(value) is None:
        return MSG_INVALID_DATE
    return None


def check_amount(value: Any) -> str | None:
    if parse_amount(value) is None:
        return MSG_INVALID_AMOUNT
    return None


def check_type(value: Any, required: bool = True) -> str | None:
    """Type must be income/expense; when not required, absence is allowed."""
    if value is None and not required:
        return None
    if not isinstance(value, str) or value not in _VALID_TYPES:
        return MSG_INVALID_TYPE
    return None


def check_optional_dates(data: Mapping[str, Any]) -> str | None:
    for key in ("end_date", "next_due_date"):
        value = data.get(key)
        if value is not None and parse_calendar_date(value) is None:
            return MSG_INVALID_DATE
    return None


def check_balance(value: Any) -> str | None:
    if value is not None and parse_amount(value) is None:
        return MSG_INVALID_AMOUNT
    return None


def check_budget_month(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 12:
        return MSG_INVALID_BUDGET_MONTH
    return None


def validate_transaction_fields(
    data: Mapping[str, Any], require_type: bool = True,
) -> tuple[str, str] | None:
    """Run every creation check in order. Returns (field, message) for the first failure."""
    checks = (
        ("description", lambda: check_description(data.get("description"))),
        ("date", lambda: check_date(data.get("date"))),
        ("amount", lambda: check_amount(data.get("amount"))),
        ("type", lambda: check_type(data.get("type"), required=require_type)),
        ("date", lambda: check_optional_dates(data)),
        ("balance", lambda: check_balance(data.get("balance"))),
        ("budget_month", lambda: check_budget_month(data.get("budget_month"))),
    )
    for field_name, check in checks:
        error = check()
        if error:
            return field_name, error
    return None


# ─── Coercion ────────────────────────────────────────────────────

def infer_type(amount: str) -> str:
    """Negative amounts are expenses; everything else is income."""
    if Decimal(amount) < 0:
        return TransactionType.EXPENSE.value
    return TransactionType.INCOME.value


def _normalize_optional_date(value: Any) -> str | None:
    parsed = parse_calendar_date(value)
    return parsed.isoformat() if parsed else None


def prepare_new_transaction(
    data: Mapping[str, Any], user_id: int, require_type: bool = True,
) -> dict[str, Any]:
    """Validate a snake_case payload and build the storage input for it.

    Raises TransactionValidationError with the first failing check's message.
    """
    failure = validate_transaction_fields(data, require_type=require_type)
    if failure:
        field_name, message = failure
        raise TransactionValidationError(message, field=field_name)

    parsed_date = parse_calendar_date(data["date"])
    amount = parse_amount(data["amount"])
    item = {k: v for k, v in data.items() if k in TRANSACTION_MUTABLE_FIELDS}
    item.update(
        user_id=user_id,
        description=data["description"].strip(),
        date=parsed_date.isoformat(),
        amount=amount,
        type=data.get("type") or infer_type(amount),
        category=data.get("category") or DEFAULT_CATEGORY,
        end_date=_normalize_optional_date(data.get("end_date")),
        next_due_date=_normalize_optional_date(data.get("next_due_date")),
    )
    if item.get("balance") is not None:
        item["balance"] = parse_amount(item["balance"])
    if item.get("budget_month") is None and item.get("budget_year") is None:
        item["budget_month"] = parsed_date.month
        item["budget_year"] = parsed_date.year
    return item


def prepare_transaction_update(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Validate only the keys present in a partial update and normalize them.

    Explicit None is kept (it clears the field) except for required fields,
    which cannot be cleared.
    """
    changes = {k: v for k, v in partial.items() if k in TRANSACTION_MUTABLE_FIELDS}
    checks = (
        ("description", check_description),
        ("date", check_date),
        ("amount", check_amount),
        ("type", check_type),
    )
    for field_name, check in checks:
        if field_name in changes:
            error = check(changes[field_name])
            if error:
                raise TransactionValidationError(error, field=field_name)
    error = (
        check_optional_dates(changes)
        or check_balance(changes.get("balance"))
        or check_budget_month(changes.get("budget_month"))
    )
    if error:
        raise TransactionValidationError(error)
    if "category" in changes and not changes["category"]:
        changes["category"] = DEFAULT_CATEGORY

    if "description" in changes:
        changes["description"] = changes["description"].strip()
    if "date" in changes:
        changes["date"] = parse_calendar_date(changes["date"]).isoformat()
    if "amount" in changes:
        changes["amount"] = parse_amount(changes["amount"])
    for key in ("end_date", "next_due_date"):
        if changes.get(key) is not None:
            changes[key] = _normalize_optional_date(changes[key])
    if changes.get("balance") is not None:
        changes["balance"] = parse_amount(changes["balance"])
    return changes
