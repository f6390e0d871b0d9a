"""Transaction Route Helpers — storage error mapping, ownership checks, filter dispatch.

Invariants:
    - storage_errors passes 4xx domain errors through and converts everything
      else (DatabaseError included) into InternalError with an
      action-specific message; the original exception is only logged
    - get_owned_transaction_or_raise: missing → 404, foreign owner → 403, checked
      before any mutation
    - run_transaction_query issues exactly one storage call per request

Design Decisions:
    - Extracted from transactions.py so the route module stays a thin sequence of
      authenticate → validate → storage → authorize → shape
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fintrack.core.domain_types import Principal, Transaction
from fintrack.core.errors import (
    AuthorizationError, ErrorContext, FinanceTrackerError, InternalError,
    ResourceNotFoundError,
)
from fintrack.core.query_filters import FilterKind, TransactionQuery
from fintrack.core.repository_protocols import TransactionStorage

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(
    action: str, principal: Principal | None = None,
) -> Iterator[None]:
    """Map storage failures (including DatabaseError) to a generic 500 for `action`."""
    user_id = principal.id if principal else None
    try:
        yield
    except FinanceTrackerError as e:
        if e.http_status < 500:
            raise
        logger.error(
            f"Storage failure while {action}: {e.message}",
            extra={**e.log_extra(), "user_id": user_id},
        )
        raise InternalError(
            f"Error {action}", ErrorContext(user_id=user_id),
        ) from e
    except Exception as e:
        logger.error(
            f"Storage failure while {action}: {e}",
            exc_info=True,
            extra={"user_id": user_id},
        )
        raise InternalError(
            f"Error {action}", ErrorContext(user_id=user_id),
        ) from e


async def get_owned_transaction_or_raise(
    storage: TransactionStorage, transaction_id: int, principal: Principal,
) -> Transaction:
    """Fetch a transaction and check it belongs to the principal."""
    with storage_errors("fetching transaction", principal):
        txn = await storage.get_transaction_by_id(transaction_id)
    context = ErrorContext(user_id=principal.id, transaction_id=transaction_id)
    if txn is None:
        raise ResourceNotFoundError("Transaction", context)
    if txn.user_id != principal.id:
        raise AuthorizationError(context)
    return txn


async def run_transaction_query(
    storage: TransactionStorage, user_id: int, query: TransactionQuery,
) -> list[Transaction]:
    if query.kind == FilterKind.DATE_RANGE:
        return await storage.get_transactions_by_date_range(
            user_id, query.start, query.end,
        )
    if query.kind == FilterKind.BUDGET_MONTH:
        return await storage.get_transactions_by_budget_month(
            user_id, query.month, query.year,
        )
    if query.kind == FilterKind.CATEGORY:
        return await storage.get_transactions_by_category(user_id, query.category)
    return await storage.get_transactions(user_id)
