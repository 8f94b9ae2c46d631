"""
ASGI entry point: ``uvicorn stockledger.api.main:app``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from stockledger.api.middleware.error_handler import setup_exception_handlers
from stockledger.api.routes import (
    analytics_router,
    backup_router,
    health_router,
    movements_router,
    products_router,
)
from stockledger.config import Settings, configure_logging, get_logger, get_settings
from stockledger.core.exceptions import DatabaseError

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Upgrade the schema and open the pool before serving; close it after."""
    from stockledger.infrastructure.storage.sqlite import close_pool, get_pool
    from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

    settings = get_settings()
    db_path = settings.storage.db_path
    logger.info("api_starting", db_path=str(db_path), environment=settings.environment)

    failed = [r for r in await run_migrations() if not r.success]
    if failed:
        # Never serve on a partially upgraded schema
        raise DatabaseError("migrate", f"v{failed[0].version:03d} {failed[0].name}: {failed[0].error}")

    pool = await get_pool()
    logger.info("api_ready", pool_size=pool.pool_size)
    try:
        yield
    finally:
        await close_pool()
        logger.info("api_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Inventory ledger with moving-average costing and financial analytics",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Added last runs first: errors are caught outside the request logger
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    origins = settings.api.cors_origin_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials="*" not in origins,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )

    setup_exception_handlers(app)

    for router in (
        health_router,
        products_router,
        movements_router,
        analytics_router,
        backup_router,
    ):
        app.include_router(router)

    return app


app = create_app()
