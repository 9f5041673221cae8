"""
Run one Asana sync from the command line
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings
from core.exceptions import PipelineException
from core.logging import setup_logging
from core.points import CategoryPointTable
from ingestion.extractors.asana_extractor import AsanaExtractor
from ingestion.runner import SyncRunner
from ingestion.transformers.normalizer import TaskNormalizer

logger = logging.getLogger(__name__)


async def run_sync() -> int:
    """Run a single sync; returns the process exit code"""
    engine = create_async_engine(settings.DATABASE_URL, echo=False)

    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    try:
        async with AsyncSessionLocal() as session:
            async with AsanaExtractor.from_settings(settings) as source:
                runner = SyncRunner(session, source, TaskNormalizer(CategoryPointTable(settings.CATEGORY_POINTS)))
                result = await runner.run()

        logger.info(
            f"Sync completed: processed={result.tasks_processed}, "
            f"updated={result.tasks_updated}, duration={result.duration_ms}ms"
        )
        return 0

    except PipelineException as e:
        logger.error(f"Sync failed: {e.message}")
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_sync()))
