"""Storage factory and settings — backend selection from configuration."""

from fintrack.config import Settings
from fintrack.infrastructure.database_storage import DatabaseStorage
from fintrack.infrastructure.memory_storage import MemStorage
from fintrack.infrastructure.storage_factory import build_storage


async def test_memory_backend_is_default():
    storage = await build_storage(Settings(_env_file=None))
    assert isinstance(storage, MemStorage)


async def test_database_backend_creates_tables():
    settings = Settings(
        _env_file=None,
        storage_backend="database",
        database_url="sqlite+aiosqlite:///:memory:",
    )
    storage = await build_storage(settings)
    try:
        assert isinstance(storage, DatabaseStorage)
        assert await storage.get_user(1) is None
        assert await storage.health_check() is True
    finally:
        await storage.close()


def test_postgres_url_gets_async_driver():
    settings = Settings(_env_file=None, database_url="postgresql://u:p@db/fin")
    assert settings.database_url == "postgresql+asyncpg://u:p@db/fin"
