"""Lessonbook API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LessonbookError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Ledger loaded from the store once, in the lifespan, before any request is served

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Controllers kept on app.state: one owner of ledger state per process, no module globals
    - Static build (browser UI) mounted after API routes so /api/v1/* takes precedence
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from lessonbook.api.error_handlers import register_error_handlers
from lessonbook.api.routes import archive, auth, health, ledger, students
from lessonbook.config import get_settings
from lessonbook.infrastructure.database import DatabaseSessionManager
from lessonbook.infrastructure.ledger_store import SqlLedgerStore
from lessonbook.infrastructure.observability import setup_logging
from lessonbook.services.access_gate import AccessGate
from lessonbook.services.ledger_controller import LedgerController

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db_manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_create_schema:
        await db_manager.create_schema()
    store = SqlLedgerStore(db_manager)
    ledger_controller = LedgerController(store)
    await ledger_controller.load()

    app.state.db_manager = db_manager
    app.state.ledger = ledger_controller
    app.state.gate = AccessGate(
        store,
        ttl_seconds=settings.session_ttl_seconds,
        max_sessions=settings.max_sessions,
    )
    logger.info("Lessonbook API started")
    yield
    logger.info("Lessonbook API shutting down")
    await db_manager.dispose()


app = FastAPI(
    title="Lessonbook API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(students.router)
app.include_router(archive.router)
app.include_router(ledger.router)

register_error_handlers(app)

# html=True enables SPA fallback (serves index.html for unknown routes)
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
