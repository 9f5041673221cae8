"""
Task reads
"""

from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from models.task import Task


async def list_tasks(db: AsyncSession, assignee_name: Optional[str] = None) -> List[Task]:
    """
    Full task snapshot, optionally for one assignee.

    The aggregator filters in memory, so this returns every row in a stable
    order rather than pushing the window into SQL.
    """
    query = select(Task).order_by(Task.external_id)
    if assignee_name:
        query = query.where(Task.assignee_name == assignee_name)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_task(db: AsyncSession, external_id: str) -> Optional[Task]:
    result = await db.execute(select(Task).where(Task.external_id == external_id))
    return result.scalar_one_or_none()


async def count_tasks(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Task))
    return result.scalar() or 0
