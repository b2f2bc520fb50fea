"""Health check endpoint."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter

from nursecare import __version__
from nursecare.api.dependencies import StorageDep
from nursecare.api.models.health import DatabaseHealth, HealthResponse
from nursecare.domain.ports import StoragePort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


async def check_database_health(storage: StoragePort) -> DatabaseHealth:
    """Check database connection health.

    Parameters:
        storage: Storage adapter instance

    Returns:
        DatabaseHealth: Database health status
    """
    db_type = storage.db_config.db_type if hasattr(storage, 'db_config') else "unknown"

    start_time = time.time()
    result = storage.query("SELECT 1")
    if result.is_success():
        response_time = (time.time() - start_time) * 1000
        return DatabaseHealth(
            status="connected",
            type=db_type,
            response_time_ms=round(response_time, 2)
        )

    logger.warning(f"Database query failed: {result.error}")
    return DatabaseHealth(status="disconnected", type=db_type, response_time_ms=None)


@router.get("/health", response_model=HealthResponse)
async def health_check(storage: StorageDep) -> HealthResponse:
    """Health check endpoint.

    Reports overall status and database connectivity. Used by monitoring
    tools and load balancers.
    """
    db_health = await check_database_health(storage)

    return HealthResponse(
        status="healthy" if db_health.status == "connected" else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database=db_health
    )
