"""
Day-off endpoints
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from analytics.day_off import DayOffAdjuster
from api.dependencies import get_day_off_adjuster, get_db
from core.exceptions import DuplicateRecordError
from repositories.day_offs import add_day_off, delete_day_off, list_day_offs
from schemas.api import DayOffCreate, DayOffListResponse, DayOffResponse, ErrorResponse

router = APIRouter(prefix="/day-offs", tags=["Day Offs"])


@router.get("", response_model=DayOffListResponse)
async def get_day_offs(
    assignee_email: Optional[str] = Query(None, description="Member email"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    adjuster: DayOffAdjuster = Depends(get_day_off_adjuster)
):
    """Day-offs in a period and the target reduction they imply."""
    email = assignee_email.strip().lower() if assignee_email else None
    day_offs = await list_day_offs(db, email, start_date, end_date)
    half_days = sum(1 for d in day_offs if d.is_half_day)

    return DayOffListResponse(
        day_offs=[DayOffResponse.from_orm(d) for d in day_offs],
        full_days=len(day_offs) - half_days,
        half_days=half_days,
        target_reduction=adjuster.reduction(day_offs)
    )


@router.post("", response_model=DayOffResponse, status_code=201, responses={409: {"model": ErrorResponse}})
async def create_day_off(payload: DayOffCreate, db: AsyncSession = Depends(get_db)):
    try:
        day_off = await add_day_off(db, payload.assignee_email, payload.date, payload.is_half_day, payload.reason)
    except DuplicateRecordError as e:
        return JSONResponse(status_code=409, content={"error": e.message})
    return DayOffResponse.from_orm(day_off)


@router.delete("/{day_off_id}", status_code=204)
async def remove_day_off(day_off_id: int, db: AsyncSession = Depends(get_db)):
    if not await delete_day_off(db, day_off_id):
        raise HTTPException(status_code=404, detail=f"Day off {day_off_id} not found")
    return Response(status_code=204)
