"""Batch Import — all-or-nothing validation and duplicate partitioning for CSV imports.

Invariants:
    - PURE: no IO; hash lookups are done by the caller and passed in as a set
    - Any invalid record rejects the whole batch with "Invalid CSV data"
    - A record whose import_hash is already stored, or already seen earlier in
      the same batch, is skipped; records without a hash are always inserted
    - Insertion order follows submission order

Design Decisions:
    - Validation reuses prepare_new_transaction with require_type=False: imported
      rows may omit type, which is then inferred from the amount sign
    - partition returns plain lists + a count so the route can skip the batch
      insert entirely when nothing is left
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from fintrack.core.errors import TransactionValidationError
from fintrack.core.validate_transaction import prepare_new_transaction

MSG_INVALID_CSV = "Invalid CSV data"


@dataclass
class ImportPlan:
    to_insert: list[dict[str, Any]] = field(default_factory=list)
    skipped: int = 0


def prepare_import_batch(
    records: Sequence[Mapping[str, Any]], user_id: int,
) -> list[dict[str, Any]]:
    """Validate every record; raise once for the batch if any fails."""
    prepared = []
    for index, record in enumerate(records):
        try:
            prepared.append(
                prepare_new_transaction(record, user_id, require_type=False),
            )
        except TransactionValidationError as e:
            raise TransactionValidationError(
                MSG_INVALID_CSV, field=f"transactions[{index}].{e.field}",
            ) from e
    return prepared


def import_hashes(items: Sequence[Mapping[str, Any]]) -> list[str]:
    """Distinct non-empty hashes in submission order."""
    seen: dict[str, None] = {}
    for item in items:
        h = item.get("import_hash")
        if h:
            seen.setdefault(h, None)
    return list(seen)


def partition_duplicates(
    items: Sequence[dict[str, Any]], existing_hashes: set[str],
) -> ImportPlan:
    """Split prepared items into inserts and skips."""
    plan = ImportPlan()
    claimed = set(existing_hashes)
    for item in items:
        h = item.get("import_hash")
        if h and h in claimed:
            plan.skipped += 1
            continue
        if h:
            claimed.add(h)
        plan.to_insert.append(item)
    return plan
