"""
Health check endpoint with database and last sync status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text
from api.dependencies import get_db
from models.base import SyncStatus
from repositories.sync_runs import latest_sync_run
from repositories.tasks import count_tasks
from schemas.api import HealthCheckResponse, SyncRunSummary
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Number of stored tasks
    - The most recent sync run

    Status is unhealthy without a database, degraded when the last sync
    failed, healthy otherwise.
    """
    db_connected = False
    total_tasks = 0
    last_sync = None

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
        total_tasks = await count_tasks(db)
        run = await latest_sync_run(db)
        if run is not None:
            last_sync = SyncRunSummary.from_orm(run)
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")

    if not db_connected:
        status = "unhealthy"
    elif last_sync is not None and last_sync.status == SyncStatus.ERROR.value:
        status = "degraded"
    else:
        status = "healthy"

    return HealthCheckResponse(
        status=status,
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        total_tasks=total_tasks,
        last_sync=last_sync
    )
