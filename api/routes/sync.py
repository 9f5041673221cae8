"""
Sync trigger and sync status endpoints
"""

import asyncio
import logging
import uuid
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_normalizer, get_sync_lock, get_task_source
from core.config import settings
from core.exceptions import PipelineException
from ingestion.base import TaskSource
from ingestion.runner import SyncRunner
from ingestion.transformers.normalizer import TaskNormalizer
from repositories.sync_runs import recent_sync_runs
from schemas.api import ErrorResponse, SyncResult, SyncRunSummary, SyncStatusResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post(
    "",
    response_model=SyncResult,
    responses={409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def trigger_sync(
    request: Request,
    db: AsyncSession = Depends(get_db),
    source: TaskSource = Depends(get_task_source),
    normalizer: TaskNormalizer = Depends(get_normalizer),
    lock: asyncio.Lock = Depends(get_sync_lock)
):
    """
    Run a full sync now.

    Returns 409 while another sync (manual or scheduled) is in progress and
    500 with the error message when the sync fails.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")

    if lock.locked():
        logger.warning(f"[{request_id}] POST /sync rejected: sync already running")
        return JSONResponse(status_code=409, content={"error": "A sync is already running"})

    async with lock:
        logger.info(f"[{request_id}] POST /sync")
        try:
            return await SyncRunner(db, source, normalizer).run()
        except PipelineException as e:
            logger.error(f"[{request_id}] Sync failed: {e.message}")
            return JSONResponse(status_code=500, content={"error": e.message})
        except Exception as e:
            logger.exception(f"[{request_id}] Sync failed with unexpected error")
            return JSONResponse(status_code=500, content={"error": str(e) or type(e).__name__})


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(
    limit: int = Query(settings.SYNC_STATUS_LIMIT, ge=1, le=100, description="Number of recent runs to return"),
    db: AsyncSession = Depends(get_db),
    lock: asyncio.Lock = Depends(get_sync_lock)
):
    """Most recent sync runs, newest first."""
    runs = await recent_sync_runs(db, limit=limit)
    return SyncStatusResponse(
        runs=[SyncRunSummary.from_orm(run) for run in runs],
        is_running=lock.locked()
    )
