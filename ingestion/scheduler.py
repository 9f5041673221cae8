import logging
import asyncio
from typing import Callable, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker
from core.config import settings
from core.exceptions import PipelineException
from core.points import CategoryPointTable
from ingestion.base import TaskSource
from ingestion.runner import SyncRunner
from ingestion.extractors.asana_extractor import AsanaExtractor
from ingestion.transformers.normalizer import TaskNormalizer
from schemas.api import SyncResult

logger = logging.getLogger(__name__)

JOB_ID = "asana_sync"


class SyncScheduler:
    """
    Runs the sync on a fixed interval.

    Shares ``lock`` with the HTTP trigger so only one sync runs per process;
    a tick that finds the lock held is skipped.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        lock: asyncio.Lock,
        source_factory: Optional[Callable[[], TaskSource]] = None,
        interval_minutes: int = 30
    ):
        self.scheduler = AsyncIOScheduler()
        self.session_factory = session_factory
        self.lock = lock
        self.source_factory = source_factory or (lambda: AsanaExtractor.from_settings(settings))
        self.interval_minutes = interval_minutes

    async def run_sync_job(self) -> Optional[SyncResult]:
        """Job to run one sync"""
        if self.lock.locked():
            logger.info("Scheduler: sync already running, skipping this tick")
            return None

        async with self.lock:
            logger.info("Scheduler: starting sync job")
            async with self.session_factory() as session:
                try:
                    async with self.source_factory() as source:
                        runner = SyncRunner(
                            session,
                            source,
                            TaskNormalizer(CategoryPointTable(settings.CATEGORY_POINTS))
                        )
                        return await runner.run()
                except PipelineException as e:
                    logger.error(f"Scheduler: sync job failed - {e.message}")
                    return None
                except Exception as e:
                    logger.error(f"Scheduler: sync job failed - {type(e).__name__}: {e}")
                    return None

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_sync_job,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Sync scheduler started (every {self.interval_minutes} minutes)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Sync scheduler stopped")
