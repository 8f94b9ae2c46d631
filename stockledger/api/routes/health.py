"""Liveness and database readiness probes."""

import time

from fastapi import APIRouter, Depends

from stockledger.api.dependencies import get_app_settings, get_store
from stockledger.application.dto.responses import DatabaseHealthResponse, HealthResponse
from stockledger.config import Settings, get_logger
from stockledger.core.exceptions import LedgerError
from stockledger.core.interfaces import Collection, IEntityStore
from stockledger.core.services.snapshot import CURRENT_SCHEMA_VERSION

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _report(settings: Settings, database: DatabaseHealthResponse | None = None) -> HealthResponse:
    healthy = database is None or database.status == "ok"
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=settings.app_version,
        uptime_seconds=round(time.monotonic() - _started, 3),
        schema_version=CURRENT_SCHEMA_VERSION,
        database=database,
    )


@router.get("", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    return _report(settings)


@router.get("/db", response_model=HealthResponse)
async def db_health(
    store: IEntityStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """Reads the product and movement counts; any storage failure reports unhealthy."""
    try:
        database = DatabaseHealthResponse(
            status="ok",
            products=await store.count(Collection.PRODUCTS),
            movements=await store.count(Collection.MOVEMENTS),
        )
    except LedgerError as e:
        logger.warning("db_health_failed", error=e.message)
        database = DatabaseHealthResponse(status="error", error=e.message)
    return _report(settings, database)
