"""Accounts — registration and current-user lookup.

Invariants:
    - Username and email are unique: checked before create, reported as 400
    - Stored passwords are bcrypt hashes, computed off the event loop;
      responses never include the password
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from fintrack.api.dependencies import get_current_principal, get_storage
from fintrack.api.routes.transaction_helpers import storage_errors
from fintrack.core.domain_types import Principal
from fintrack.core.errors import DuplicateUserError, ResourceNotFoundError
from fintrack.core.repository_protocols import TransactionStorage
from fintrack.core.security import hash_password
from fintrack.schemas.user import UserCreate, UserResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/register", response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: UserCreate, storage: TransactionStorage = Depends(get_storage),
):
    """Create an account."""
    with storage_errors("creating user"):
        if await storage.get_user_by_username(body.username):
            raise DuplicateUserError("username")
        if await storage.get_user_by_email(body.email):
            raise DuplicateUserError("email")
        user = await storage.create_user({
            "username": body.username,
            "password": await run_in_threadpool(hash_password, body.password),
            "name": body.name,
            "email": body.email,
        })
    return UserResponse.from_record(user)


@router.get("/user", response_model=UserResponse)
async def current_user(
    principal: Principal = Depends(get_current_principal),
    storage: TransactionStorage = Depends(get_storage),
):
    """Return the authenticated account."""
    with storage_errors("fetching user", principal):
        user = await storage.get_user(principal.id)
    if user is None:
        raise ResourceNotFoundError("User")
    return UserResponse.from_record(user)
