"""Book Catalog API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CatalogError → {status: "error", ...} JSON envelopes
    - CORS configured from settings (not hardcoded)
    - Database connected (with bounded retries) on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py; main only wires them
    - Request logging as plain HTTP middleware: one line per request with status and latency
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.error_handlers import register_error_handlers
from catalog.api.routes import books, health
from catalog.config import get_settings
from catalog.infrastructure.database import init_db
from catalog.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
    )
    await manager.connect_with_retry(
        retries=settings.database_connect_retries,
        delay_seconds=settings.database_retry_delay_seconds,
    )
    if settings.database_auto_create:
        await manager.create_schema()
    logger.info("Book Catalog API started")
    yield
    logger.info("Book Catalog API shutting down")
    await manager.dispose()


app = FastAPI(
    title="Book Catalog API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return response


# Routes — explicit registration
app.include_router(health.router)
app.include_router(books.router)

register_error_handlers(app)
