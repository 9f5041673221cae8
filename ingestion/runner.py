# ============================================================================
# File: ingestion/runner.py
# Description: Sync orchestrator with per-record fault isolation
# ============================================================================
"""
Sync Runner - Orchestrates fetch, normalize and upsert for one sync run.

This module provides sync orchestration with:
- A SyncRun record created before anything else and finalized exactly once
- All-or-nothing paging: a source failure writes no tasks
- Per-record isolation: a task that fails to normalize or upsert is skipped
- Accurate processed / updated counts and duration
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import time

from ingestion.base import TaskSource
from ingestion.transformers.normalizer import TaskNormalizer
from ingestion.loaders.task_loader import TaskLoader
from models.base import SyncStatus
from repositories.sync_runs import create_sync_run, finalize_sync_run
from schemas.api import SyncResult
from core.exceptions import PipelineException

logger = logging.getLogger(__name__)


def _error_message(error: Exception) -> str:
    if isinstance(error, PipelineException):
        return error.message
    return str(error) or type(error).__name__


class SyncRunner:
    """
    Sync Orchestrator

    Responsibilities:
    - Record the run (running -> success | error)
    - Page through the source
    - Normalize and upsert each task independently
    - Report counts and duration
    """

    def __init__(
        self,
        db_session: AsyncSession,
        source: TaskSource,
        normalizer: Optional[TaskNormalizer] = None,
        loader: Optional[TaskLoader] = None
    ):
        self.db = db_session
        self.source = source
        self.normalizer = normalizer or TaskNormalizer()
        self.loader = loader or TaskLoader(db_session)

    async def run(self) -> SyncResult:
        """
        Run one full sync.

        Pipeline phases:
        1. Create the SyncRun (status=running)
        2. Fetch every page from the source
        3. Normalize and upsert each task
        4. Finalize the SyncRun

        Returns:
            SyncResult with processed / updated counts and duration

        Raises:
            ConfigurationError: Source credentials are missing
            SourceError: Paging failed
            Exception: Any failure after the run was created is re-raised once
                the run is finalized as error
            LoadError: The run record could not be created or finalized
        """
        run = await create_sync_run(self.db)
        run_id = run.id
        started = time.monotonic()

        logger.info(f"Sync run {run_id} started for {self.source.source_name}")

        # --------------------------------------------------
        # PHASE 1: FETCH (fatal on failure)
        # --------------------------------------------------
        try:
            records = await self.source.fetch_all()
        except Exception as e:
            await self._fail(run_id, started, e, phase="fetch")
            raise

        try:
            # --------------------------------------------------
            # PHASE 2: NORMALIZE (skip unusable records)
            # --------------------------------------------------
            normalized, skipped = self.normalizer.normalize_many(records)

            # --------------------------------------------------
            # PHASE 3: UPSERT (one transaction per task)
            # --------------------------------------------------
            tasks_updated, failed = await self.loader.load(normalized)
        except Exception as e:
            await self._fail(run_id, started, e, phase="load")
            raise

        # --------------------------------------------------
        # PHASE 4: FINALIZE
        # --------------------------------------------------
        duration_ms = int((time.monotonic() - started) * 1000)
        await finalize_sync_run(
            self.db,
            run_id,
            status=SyncStatus.SUCCESS,
            tasks_processed=len(records),
            tasks_updated=tasks_updated,
            duration_ms=duration_ms
        )

        logger.info(
            f"Sync run {run_id} completed - "
            f"Processed: {len(records)}, Updated: {tasks_updated}, "
            f"Skipped: {skipped + len(failed)}, Duration: {duration_ms}ms"
        )

        return SyncResult(
            success=True,
            tasks_processed=len(records),
            tasks_updated=tasks_updated,
            duration_ms=duration_ms,
            sync_run_id=run_id
        )

    async def _fail(self, run_id: int, started: float, error: Exception, phase: str) -> None:
        """Finalize the run as error; the caller re-raises."""
        message = _error_message(error)
        duration_ms = int((time.monotonic() - started) * 1000)

        if isinstance(error, PipelineException):
            logger.error(
                f"Sync run {run_id} failed during {phase}: {message}",
                extra={"error_context": error.to_dict()}
            )
        else:
            logger.exception(f"Sync run {run_id} failed during {phase} with unexpected error")

        # Clear any half-finished record transaction before the run update
        await self.db.rollback()
        await finalize_sync_run(
            self.db,
            run_id,
            status=SyncStatus.ERROR,
            duration_ms=duration_ms,
            error_message=message
        )
