"""Request Dependencies — storage handle and authenticated principal.

Invariants:
    - Storage is read from app.state, set once at startup (never a module global)
    - Password checks run in the threadpool, never on the event loop
    - get_current_principal raises UnauthenticatedError (401) when no valid
      credentials are attached; handlers receive an explicit Principal value
    - Routes depend on these callables so tests can swap them via
      app.dependency_overrides

Design Decisions:
    - HTTP Basic over sessions: stateless, no cookie store to wire up; the
      mechanism is isolated here so another scheme replaces one function
"""

import logging

from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from fintrack.core.domain_types import Principal
from fintrack.core.errors import UnauthenticatedError
from fintrack.core.repository_protocols import TransactionStorage
from fintrack.core.security import verify_password

logger = logging.getLogger(__name__)

_basic = HTTPBasic(auto_error=False)


def get_storage(request: Request) -> TransactionStorage:
    """FastAPI dependency for the process storage instance."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise RuntimeError("Storage not initialized")
    return storage


async def get_current_principal(
    credentials: HTTPBasicCredentials | None = Depends(_basic),
    storage: TransactionStorage = Depends(get_storage),
) -> Principal:
    """Resolve the caller from Basic credentials or reject with 401."""
    if credentials is None:
        raise UnauthenticatedError()
    user = await storage.get_user_by_username(credentials.username)
    if user is None or not await run_in_threadpool(
        verify_password, credentials.password, user.password,
    ):
        logger.info("Rejected credentials for unknown user or bad password")
        raise UnauthenticatedError()
    return Principal(id=user.id, username=user.username)
