"""Listing Filters — turns raw query-string values into one typed storage query.

Invariants:
    - PURE: no IO; raises TransactionValidationError on malformed input
    - Precedence: date range > budget month > category > unfiltered
    - Date bounds are datetime.date values, never strings
    - Each malformed parameter has its own message (month vs year never conflated)

Design Decisions:
    - A single frozen dataclass result: the route dispatches on .kind without
      re-inspecting the raw parameters
    - A lone startDate or endDate yields an open-ended range (date.min / date.max)
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from fintrack.core.errors import TransactionValidationError
from fintrack.core.validate_transaction import parse_calendar_date

MSG_INVALID_DATE_PARAM = "Invalid date format"
MSG_INVALID_BUDGET_MONTH = "Invalid budget month"
MSG_INVALID_BUDGET_YEAR = "Invalid budget year"

_INT_PATTERN = re.compile(r"^[+-]?\d+$")


class FilterKind(str, Enum):
    ALL = "all"
    DATE_RANGE = "date_range"
    BUDGET_MONTH = "budget_month"
    CATEGORY = "category"


@dataclass(frozen=True)
class TransactionQuery:
    kind: FilterKind
    start: date | None = None
    end: date | None = None
    month: int | None = None
    year: int | None = None
    category: str | None = None


def _present(value: str | None) -> bool:
    return value is not None and value != ""


def parse_int_param(value: str) -> int | None:
    text = value.strip()
    if not _INT_PATTERN.match(text):
        return None
    return int(text)


def _parse_date_range(start_raw: str | None, end_raw: str | None) -> TransactionQuery:
    start = date.min
    end = date.max
    if _present(start_raw):
        start = parse_calendar_date(start_raw)
    if _present(end_raw):
        end = parse_calendar_date(end_raw)
    if start is None or end is None:
        raise TransactionValidationError(MSG_INVALID_DATE_PARAM, field="startDate/endDate")
    return TransactionQuery(FilterKind.DATE_RANGE, start=start, end=end)


def _parse_budget(month_raw: str | None, year_raw: str | None) -> TransactionQuery:
    month = parse_int_param(month_raw) if _present(month_raw) else None
    if month is None or not 1 <= month <= 12:
        raise TransactionValidationError(MSG_INVALID_BUDGET_MONTH, field="budgetMonth")
    year = parse_int_param(year_raw) if _present(year_raw) else None
    if year is None or not 1 <= year <= 9999:
        raise TransactionValidationError(MSG_INVALID_BUDGET_YEAR, field="budgetYear")
    return TransactionQuery(FilterKind.BUDGET_MONTH, month=month, year=year)


def parse_transaction_query(
    start_date: str | None = None,
    end_date: str | None = None,
    budget_month: str | None = None,
    budget_year: str | None = None,
    category: str | None = None,
) -> TransactionQuery:
    """Pick the single filter a listing request asks for."""
    if _present(start_date) or _present(end_date):
        return _parse_date_range(start_date, end_date)
    if _present(budget_month) or _present(budget_year):
        return _parse_budget(budget_month, budget_year)
    if _present(category):
        return TransactionQuery(FilterKind.CATEGORY, category=category)
    return TransactionQuery(FilterKind.ALL)
