"""
Weekly target endpoints
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db
from core.exceptions import LoadError
from repositories.targets import list_targets, replace_all_targets
from schemas.api import ErrorResponse, TargetsReplaceRequest, TargetsResponse, WeeklyTargetOut
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/targets", tags=["Targets"])


async def _targets_response(db: AsyncSession, start: Optional[date] = None, end: Optional[date] = None):
    targets = await list_targets(db, start, end)
    return TargetsResponse(targets=[WeeklyTargetOut.from_orm(t) for t in targets], total=len(targets))


@router.get("", response_model=TargetsResponse)
async def get_targets(
    start_date: Optional[date] = Query(None, description="Earliest week start"),
    end_date: Optional[date] = Query(None, description="Latest week start"),
    db: AsyncSession = Depends(get_db)
):
    return await _targets_response(db, start_date, end_date)


@router.put("", response_model=TargetsResponse, responses={500: {"model": ErrorResponse}})
async def put_targets(payload: TargetsReplaceRequest, db: AsyncSession = Depends(get_db)):
    """
    Replace every weekly target with the submitted set.

    Readers running between the delete and the insert see no targets.
    """
    try:
        await replace_all_targets(db, [t.dict() for t in payload.targets])
    except LoadError as e:
        logger.error(f"Target replace failed: {e.message}", extra={"error_context": e.to_dict()})
        return JSONResponse(status_code=500, content={"error": e.message})

    return await _targets_response(db)
