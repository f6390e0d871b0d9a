"""Finance Tracker API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FinanceTrackerError → {"error": message} responses
    - CORS configured from settings (not hardcoded)
    - Storage lives on app.state.storage; built in lifespan unless injected

Design Decisions:
    - create_app(storage=...) lets tests and embedders hand in a ready store;
      the module-level `app` builds its own from settings at startup
    - Lifespan over @app.on_event: cleaner shutdown (storage.close())
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fintrack.api.error_handlers import register_error_handlers
from fintrack.api.routes import auth, health, transactions
from fintrack.config import get_settings
from fintrack.core.repository_protocols import TransactionStorage
from fintrack.infrastructure.observability import setup_logging
from fintrack.infrastructure.storage_factory import build_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    if getattr(app.state, "storage", None) is None:
        app.state.storage = await build_storage(settings)
    logger.info("Finance tracker API started")
    yield
    await app.state.storage.close()
    logger.info("Finance tracker API shutting down")


def create_app(storage: TransactionStorage | None = None) -> FastAPI:
    settings = get_settings()
    application = FastAPI(
        title="Finance Tracker API", version="1.0.0", lifespan=lifespan,
    )
    application.state.storage = storage

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health.router)
    application.include_router(auth.router)
    application.include_router(transactions.router)

    register_error_handlers(application)
    return application


app = create_app()
