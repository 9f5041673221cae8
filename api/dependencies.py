"""
FastAPI dependencies: database session, task source and aggregation settings
"""

import asyncio
from typing import AsyncIterator
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from analytics.aggregator import AggregationConfig
from analytics.day_off import DayOffAdjuster
from core.config import settings
from core.database import async_session_maker
from core.points import CategoryPointTable
from ingestion.base import TaskSource
from ingestion.extractors.asana_extractor import AsanaExtractor
from ingestion.transformers.normalizer import TaskNormalizer


async def get_db() -> AsyncIterator[AsyncSession]:
    """Database session for one request"""
    async with async_session_maker() as session:
        yield session


async def get_task_source() -> AsyncIterator[TaskSource]:
    """Asana client for one sync; closed when the request ends"""
    source = AsanaExtractor.from_settings(settings)
    try:
        yield source
    finally:
        await source.close()


def get_normalizer() -> TaskNormalizer:
    return TaskNormalizer(CategoryPointTable(settings.CATEGORY_POINTS))


def get_aggregation_config() -> AggregationConfig:
    return AggregationConfig.from_settings(settings)


def get_day_off_adjuster() -> DayOffAdjuster:
    return DayOffAdjuster(settings.DAY_OFF_FULL_POINTS, settings.DAY_OFF_HALF_POINTS)


def get_sync_lock(request: Request) -> asyncio.Lock:
    """Process-wide lock shared by the sync route and the scheduler"""
    return request.app.state.sync_lock
