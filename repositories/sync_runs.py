"""
Sync run lifecycle and history
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from models.base import SyncStatus
from models.sync_run import SyncRun
from core.exceptions import LoadError
import logging

logger = logging.getLogger(__name__)


async def create_sync_run(db: AsyncSession) -> SyncRun:
    """Insert a run with status=running and commit."""
    run = SyncRun(
        status=SyncStatus.RUNNING,
        started_at=datetime.now(timezone.utc),
        tasks_processed=0,
        tasks_updated=0
    )
    try:
        db.add(run)
        await db.commit()
        await db.refresh(run)
    except SQLAlchemyError as e:
        await db.rollback()
        raise LoadError(
            "Failed to create sync run",
            context={"operation": "INSERT", "table_name": "sync_runs"},
            original_exception=e
        )
    return run


async def finalize_sync_run(
    db: AsyncSession,
    run_id: int,
    status: SyncStatus,
    tasks_processed: int = 0,
    tasks_updated: int = 0,
    duration_ms: Optional[int] = None,
    error_message: Optional[str] = None
) -> None:
    """
    Close a running sync run.

    Only a row still marked running is touched, so a finalized run is
    never modified again.

    Raises:
        LoadError: The run does not exist, is already finalized, or the
            update failed
    """
    stmt = (
        update(SyncRun)
        .where(SyncRun.id == run_id, SyncRun.status == SyncStatus.RUNNING)
        .values(
            status=status,
            ended_at=datetime.now(timezone.utc),
            tasks_processed=tasks_processed,
            tasks_updated=tasks_updated,
            duration_ms=duration_ms,
            error_message=error_message
        )
        .execution_options(synchronize_session=False)
    )

    try:
        result = await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise LoadError(
            f"Failed to finalize sync run {run_id}",
            context={"run_id": run_id, "operation": "UPDATE", "table_name": "sync_runs"},
            original_exception=e
        )

    if result.rowcount == 0:
        raise LoadError(
            f"Sync run {run_id} is missing or already finalized",
            context={"run_id": run_id, "status": SyncStatus(status).value}
        )


async def get_sync_run(db: AsyncSession, run_id: int) -> Optional[SyncRun]:
    result = await db.execute(
        select(SyncRun).where(SyncRun.id == run_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def recent_sync_runs(db: AsyncSession, limit: int = 5) -> List[SyncRun]:
    """Most recent runs, newest first."""
    result = await db.execute(
        select(SyncRun)
        .order_by(SyncRun.started_at.desc(), SyncRun.id.desc())
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def latest_sync_run(db: AsyncSession) -> Optional[SyncRun]:
    runs = await recent_sync_runs(db, limit=1)
    return runs[0] if runs else None
