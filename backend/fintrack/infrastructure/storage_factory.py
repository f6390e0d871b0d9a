"""Storage Factory — builds the TransactionStorage selected by settings.

Invariants:
    - Called once per process from the app lifespan
    - The database backend has its tables created before the first request
"""

import logging

from fintrack.config import Settings
from fintrack.core.repository_protocols import TransactionStorage
from fintrack.infrastructure.database import DatabaseSessionManager
from fintrack.infrastructure.database_storage import DatabaseStorage
from fintrack.infrastructure.memory_storage import MemStorage

logger = logging.getLogger(__name__)


async def build_storage(settings: Settings) -> TransactionStorage:
    if settings.storage_backend == "database":
        manager = DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        await manager.create_all()
        logger.info("Using database storage")
        return DatabaseStorage(manager)
    logger.info("Using in-memory storage")
    return MemStorage()
