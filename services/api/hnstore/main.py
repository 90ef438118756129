"""FastAPI application entry point.

HN Item Store - read-through cache and tree materialization over the
Hacker News API.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hnstore.routes import api_router
from hnstore.schemas.common import error_body
from hnstore.services.background import cancel_all, run_periodic, spawn
from hnstore.services.backfill import BackfillSweeper
from hnstore.services.hn_client import UpstreamError, close_hn_client
from hnstore.services.item_store import get_item_store, reset_item_store
from hnstore.services.snapshot import RankSnapshotter
from hnstore.settings import get_settings
from hnstore.stores.postgres import init_db, close_db, ping_db
from hnstore.stores.redis import init_redis, close_redis

logger = logging.getLogger("uvicorn.error")


def start_background_tasks() -> list[asyncio.Task[None]]:
    """Spawn the process-wide background loops once, according to settings."""
    settings = get_settings()
    store = get_item_store()
    tasks: list[asyncio.Task[None]] = []

    if settings.snapshot_enabled:
        snapshotter = RankSnapshotter(
            store,
            interval_seconds=settings.snapshot_interval_seconds,
            limit=settings.snapshot_limit,
        )
        tasks.append(spawn("rank-snapshot", snapshotter.run()))

    if settings.recent_changes_enabled:
        tasks.append(
            spawn(
                "recent-changes",
                run_periodic(
                    "recent changes",
                    settings.recent_changes_interval_seconds,
                    store.evict_recent_changes,
                ),
            )
        )

    if settings.backfill_enabled:
        sweeper = BackfillSweeper(
            store,
            batch_size=settings.backfill_batch_size,
            interval_seconds=settings.backfill_interval_seconds,
        )
        tasks.append(spawn("backfill", sweeper.run()))

    return tasks


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    db_ready = False

    try:
        await init_db()
        await ping_db()
        db_ready = True
        logger.info("Database connected")
    except Exception:
        logger.exception("Database init failed")

    if settings.cache_backend == "redis":
        try:
            await init_redis()
        except Exception:
            logger.exception("Redis init failed")

    # Background writers need the database.
    tasks = start_background_tasks() if db_ready else []

    yield

    # Shutdown
    await cancel_all(tasks)
    await close_hn_client()
    reset_item_store()
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Read-through item store for the Hacker News API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(UpstreamError)
    async def upstream_exception_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        """Transient upstream failures are retryable: 503 with structured body."""
        logger.warning(f"Upstream unavailable for {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content=error_body(
                "UPSTREAM_UNAVAILABLE",
                "Upstream API is temporarily unavailable",
                {"reason": str(exc)} if settings.debug else None,
            ),
            headers={"Retry-After": "5"},
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        return JSONResponse(
            status_code=500,
            content=error_body(
                "INTERNAL_ERROR",
                str(exc) if settings.debug else "Internal server error",
            ),
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "hnstore.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
