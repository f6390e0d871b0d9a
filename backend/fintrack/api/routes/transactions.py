"""Transactions — CRUD, filtered listing, and CSV batch import.

Invariants:
    - Every handler depends on get_current_principal: no principal → 401 before
      any validation or storage call
    - Validation failures → 400 and storage is never touched
    - Single-record operations authorize against Transaction.user_id (404 / 403)
    - Responses are TransactionResponse: user_id never leaves the server
    - Import is all-or-nothing on validation; duplicates by import hash are skipped

Design Decisions:
    - PATCH and PUT share one handler: both are partial merges here, since the
      stored record always keeps fields the payload omits
    - Storage failures surface as "Error <action>" 500s via storage_errors
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import ValidationError

from fintrack.api.dependencies import get_current_principal, get_storage
from fintrack.api.routes.transaction_helpers import (
    get_owned_transaction_or_raise, run_transaction_query, storage_errors,
)
from fintrack.core.domain_types import Principal
from fintrack.core.errors import (
    ErrorContext, ResourceNotFoundError, TransactionValidationError,
)
from fintrack.core.import_batch import (
    MSG_INVALID_CSV, import_hashes, partition_duplicates, prepare_import_batch,
)
from fintrack.core.query_filters import parse_transaction_query
from fintrack.core.repository_protocols import TransactionStorage
from fintrack.core.validate_transaction import (
    prepare_new_transaction, prepare_transaction_update,
)
from fintrack.schemas.transaction import (
    ImportRequest, ImportResult, TransactionInput, TransactionResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    budget_month: str | None = Query(None, alias="budgetMonth"),
    budget_year: str | None = Query(None, alias="budgetYear"),
    category: str | None = Query(None),
    principal: Principal = Depends(get_current_principal),
    storage: TransactionStorage = Depends(get_storage),
):
    """List the caller's transactions, optionally filtered."""
    query = parse_transaction_query(
        start_date=start_date, end_date=end_date,
        budget_month=budget_month, budget_year=budget_year,
        category=category,
    )
    with storage_errors("fetching transactions", principal):
        transactions = await run_transaction_query(storage, principal.id, query)
    logger.debug(
        f"Listed {len(transactions)} transactions",
        extra={"user_id": principal.id, "filter_kind": query.kind.value},
    )
    return [TransactionResponse.from_record(t) for t in transactions]


@router.post(
    "/import", response_model=ImportResult, status_code=status.HTTP_200_OK,
)
async def import_transactions(
    body: ImportRequest,
    principal: Principal = Depends(get_current_principal),
    storage: TransactionStorage = Depends(get_storage),
):
    """Import a batch of parsed CSV rows, skipping already-imported hashes."""
    try:
        rows = [
            TransactionInput.model_validate(raw).model_dump(exclude_unset=True)
            for raw in body.transactions
        ]
    except ValidationError as e:
        raise TransactionValidationError(MSG_INVALID_CSV) from e
    items = prepare_import_batch(rows, principal.id)

    with storage_errors("importing transactions", principal):
        existing = set()
        for h in import_hashes(items):
            if await storage.get_transaction_by_import_hash(h) is not None:
                existing.add(h)
        plan = partition_duplicates(items, existing)
        created = []
        if plan.to_insert:
            created = await storage.create_many_transactions(plan.to_insert)

    logger.info(
        "Import finished",
        extra={
            "user_id": principal.id,
            "imported": len(created), "skipped": plan.skipped,
        },
    )
    return ImportResult(imported=len(created), skipped=plan.skipped)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    principal: Principal = Depends(get_current_principal),
    storage: TransactionStorage = Depends(get_storage),
):
    """Get one transaction owned by the caller."""
    txn = await get_owned_transaction_or_raise(storage, transaction_id, principal)
    return TransactionResponse.from_record(txn)


@router.post(
    "", response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    body: TransactionInput,
    principal: Principal = Depends(get_current_principal),
    storage: TransactionStorage = Depends(get_storage),
):
    """Create a transaction for the caller."""
    item = prepare_new_transaction(body.model_dump(exclude_unset=True), principal.id)
    with storage_errors("creating transaction", principal):
        txn = await storage.create_transaction(item)
    logger.info(
        "Transaction created",
        extra={"user_id": principal.id, "transaction_id": txn.id},
    )
    return TransactionResponse.from_record(txn)


@router.api_route(
    "/{transaction_id}", methods=["PATCH", "PUT"],
    response_model=TransactionResponse,
)
async def update_transaction(
    transaction_id: int,
    body: TransactionInput,
    principal: Principal = Depends(get_current_principal),
    storage: TransactionStorage = Depends(get_storage),
):
    """Merge the supplied fields into a transaction owned by the caller."""
    changes = prepare_transaction_update(body.model_dump(exclude_unset=True))
    await get_owned_transaction_or_raise(storage, transaction_id, principal)
    with storage_errors("updating transaction", principal):
        updated = await storage.update_transaction(transaction_id, changes)
    if updated is None:
        raise ResourceNotFoundError(
            "Transaction",
            ErrorContext(user_id=principal.id, transaction_id=transaction_id),
        )
    return TransactionResponse.from_record(updated)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: int,
    principal: Principal = Depends(get_current_principal),
    storage: TransactionStorage = Depends(get_storage),
):
    """Delete a transaction owned by the caller."""
    await get_owned_transaction_or_raise(storage, transaction_id, principal)
    with storage_errors("deleting transaction", principal):
        removed = await storage.delete_transaction(transaction_id)
    if not removed:
        raise ResourceNotFoundError(
            "Transaction",
            ErrorContext(user_id=principal.id, transaction_id=transaction_id),
        )
    logger.info(
        "Transaction deleted",
        extra={"user_id": principal.id, "transaction_id": transaction_id},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
