"""
Weekly target reads and replace-all writes
"""

from datetime import date
from typing import Iterable, List, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from models.weekly_target import WeeklyTarget
from core.exceptions import LoadError
import logging

logger = logging.getLogger(__name__)


async def list_targets(
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[WeeklyTarget]:
    """Targets ordered by week then assignee, optionally limited to week starts in [start, end]."""
    query = select(WeeklyTarget).order_by(WeeklyTarget.week_start_date, WeeklyTarget.assignee_name)
    if start is not None:
        query = query.where(WeeklyTarget.week_start_date >= start)
    if end is not None:
        query = query.where(WeeklyTarget.week_start_date <= end)
    result = await db.execute(query)
    return list(result.scalars().all())


async def replace_all_targets(db: AsyncSession, targets: Iterable[dict]) -> int:
    """
    Replace the whole table with ``targets``.

    The delete is committed before the insert, so a reader in between sees
    no targets (target = 0). If the insert fails the table stays empty.

    Args:
        targets: Dicts with assignee_name, week_start_date, target_points

    Returns:
        Number of targets written
    """
    rows = [WeeklyTarget(**t) for t in targets]

    try:
        await db.execute(delete(WeeklyTarget))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise LoadError(
            "Failed to clear weekly targets",
            context={"operation": "DELETE", "table_name": "weekly_targets"},
            original_exception=e
        )

    try:
        db.add_all(rows)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise LoadError(
            "Failed to insert weekly targets",
            context={"operation": "INSERT", "table_name": "weekly_targets", "records": len(rows)},
            original_exception=e
        )

    logger.info(f"Replaced weekly targets ({len(rows)} rows)")
    return len(rows)
