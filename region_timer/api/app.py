"""FastAPI application factory"""

import asyncio
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.types import Scope

from region_timer import __version__
from region_timer.api.core.config import Settings, get_settings
from region_timer.api.core.database import get_database_manager, init_database_manager
from region_timer.api.core.logging import setup_logging
from region_timer.api.routers import regions_router
from region_timer.shared.database import DatabaseManager
from region_timer.shared.migrations.runner import MigrationRunner

logger = logging.getLogger(__name__)

# Track server start time
_start_time: float = 0.0
_db_retry_task: asyncio.Task | None = None


class FrontendFiles(StaticFiles):
    """Static frontend where unknown paths resolve to index.html (client-side routing)."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            response = await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response("index.html", scope)
        if response.status_code == 404:
            return await super().get_response("index.html", scope)
        return response


async def _on_connected(db_manager: DatabaseManager, settings: Settings) -> None:
    """Bring the schema up to date once the pool is usable."""
    if settings.run_migrations:
        await MigrationRunner(db_manager.pool).run_pending()


async def _db_retry_loop(db_manager: DatabaseManager, settings: Settings) -> None:
    """Background loop to retry DB connection after startup failure."""
    delay = 5
    max_delay = 60
    while True:
        await asyncio.sleep(delay)
        try:
            if not db_manager.is_connected:
                await db_manager.connect()
            await _on_connected(db_manager, settings)
            logger.info("Database connected (background retry)")
            return
        except asyncio.CancelledError:
            return
        except Exception as e:
            logger.warning(
                f"DB background retry failed: {type(e).__name__}: {e}, "
                f"next retry in {min(delay * 2, max_delay)}s"
            )
            delay = min(delay * 2, max_delay)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    global _start_time, _db_retry_task
    _start_time = time.time()
    _db_retry_task = None

    settings = get_settings()

    logger.info("Starting region timer API server")
    logger.info(f"Environment: {settings.environment}")

    # Wait up to 30s for the database before accepting requests; on failure
    # keep serving (routes answer 503) and reconnect in the background.
    db_manager = init_database_manager(settings)

    try:
        await asyncio.wait_for(db_manager.connect(), timeout=30)
        logger.info("Database connected")
    except TimeoutError:
        logger.warning("DB connection timed out during startup, retrying in background")
        _db_retry_task = asyncio.create_task(_db_retry_loop(db_manager, settings))
    except Exception as e:
        logger.error(
            f"DB connection failed during startup: {type(e).__name__}: {e}, retrying in background"
        )
        _db_retry_task = asyncio.create_task(_db_retry_loop(db_manager, settings))

    if db_manager.is_connected:
        await _on_connected(db_manager, settings)

    yield

    logger.info("Shutting down region timer API server")
    if _db_retry_task:
        _db_retry_task.cancel()
        _db_retry_task = None
    await db_manager.disconnect()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    app = FastAPI(
        title="Region Timer API",
        description="Tracks time spent per region, one running timer at a time",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(regions_router.router)

    @app.get("/hello_world", response_class=PlainTextResponse)
    async def hello_world():
        return "Hello, World!"

    # Liveness probe, no external dependency
    @app.get("/health")
    async def health():
        """Liveness check (no DB dependency)"""
        return {
            "status": "healthy",
            "uptime_seconds": int(time.time() - _start_time),
        }

    @app.get("/status")
    async def status():
        """Readiness / status endpoint, includes actual DB health check"""
        db_ok = False
        try:
            db_ok = await get_database_manager().check_health()
        except RuntimeError:
            db_ok = False
        return {
            "service": "region-timer",
            "version": __version__,
            "uptime_seconds": int(time.time() - _start_time),
            "db_connected": db_ok,
            "environment": settings.environment,
        }

    @app.api_route("/ping", methods=["GET", "HEAD"], response_class=PlainTextResponse)
    async def ping():
        return "pong"

    # Built frontend goes last so it never shadows API routes
    if settings.static_dir.is_dir():
        app.mount("/", FrontendFiles(directory=settings.static_dir, html=True), name="static")
        logger.info(f"Serving frontend from {settings.static_dir}")
    else:

        @app.get("/")
        async def root():
            """Root endpoint - minimal service info"""
            return {"service": "region-timer", "status": "running"}

    logger.info("FastAPI application configured")

    return app
