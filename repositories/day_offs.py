"""
Day-off list, add and delete
"""

from datetime import date
from typing import List, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from models.day_off import DayOff
from core.exceptions import DuplicateRecordError


async def list_day_offs(
    db: AsyncSession,
    assignee_email: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[DayOff]:
    query = select(DayOff).order_by(DayOff.date, DayOff.id)
    if assignee_email:
        query = query.where(DayOff.assignee_email == assignee_email)
    if start is not None:
        query = query.where(DayOff.date >= start)
    if end is not None:
        query = query.where(DayOff.date <= end)
    result = await db.execute(query)
    return list(result.scalars().all())


async def add_day_off(
    db: AsyncSession,
    assignee_email: str,
    day: date,
    is_half_day: bool = False,
    reason: Optional[str] = None
) -> DayOff:
    """
    Register a day off.

    Raises:
        DuplicateRecordError: A day off already exists for this email and date
    """
    day_off = DayOff(assignee_email=assignee_email, date=day, is_half_day=is_half_day, reason=reason)
    db.add(day_off)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateRecordError(
            f"Day off already registered for {assignee_email} on {day.isoformat()}",
            context={"assignee_email": assignee_email, "date": day.isoformat(), "operation": "INSERT"},
            original_exception=e
        )
    await db.refresh(day_off)
    return day_off


async def delete_day_off(db: AsyncSession, day_off_id: int) -> bool:
    """Delete by id; False when nothing matched."""
    result = await db.execute(delete(DayOff).where(DayOff.id == day_off_id))
    await db.commit()
    return result.rowcount > 0
