"""
Dashboard endpoint: every aggregated view for one filter selection
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from analytics.aggregator import AggregationConfig, TaskAggregator, Viewer
from analytics.day_off import DayOffAdjuster
from analytics.filters import DateWindow, TaskFilter
from api.dependencies import get_aggregation_config, get_day_off_adjuster, get_db
from core.exceptions import FilterValidationError
from repositories.day_offs import list_day_offs
from repositories.targets import list_targets
from repositories.tasks import list_tasks
from schemas.analytics import DashboardView, RankingMode, StatusFilter, TeamTargetStrategy, TimeRange
import logging
import uuid

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Dashboard"])


def resolve_window(
    config: AggregationConfig,
    week_start: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    time_range: Optional[TimeRange] = None,
    today: Optional[date] = None
) -> DateWindow:
    """
    Pick the date window from query parameters.

    Precedence: explicit start/end, then a trailing time range, then the
    week containing ``week_start`` (or today).
    """
    today = today or date.today()

    if start_date is not None or end_date is not None:
        if start_date is None or end_date is None:
            raise FilterValidationError(
                "start_date and end_date must be given together",
                context={"field_name": "start_date" if start_date is None else "end_date"}
            )
        return DateWindow(start=start_date, end=end_date)

    if time_range is not None:
        return DateWindow.for_time_range(time_range, today)

    return DateWindow.for_week(week_start or today, config.week_start_day)


@router.get("/dashboard", response_model=DashboardView)
async def get_dashboard(
    request: Request,
    week_start: Optional[date] = Query(None, description="Any day of the week to show"),
    start_date: Optional[date] = Query(None, description="Custom range start (inclusive)"),
    end_date: Optional[date] = Query(None, description="Custom range end (inclusive)"),
    time_range: Optional[TimeRange] = Query(None, description="Trailing window ending today"),
    assignees: List[str] = Query([], description="Assignee names (empty = all)"),
    categories: List[str] = Query([], description="Category codes (empty = all)"),
    status: StatusFilter = Query(StatusFilter.ALL, description="Task status"),
    ranking: Optional[RankingMode] = Query(None, description="Leaderboard ranking mode"),
    team_target_strategy: Optional[TeamTargetStrategy] = Query(None, description="Team target formula"),
    viewer_name: Optional[str] = Query(None, description="Name of the viewing member"),
    viewer_role: Optional[str] = Query(None, description="Role of the viewer (member, lead, admin)"),
    day_off_email: Optional[str] = Query(None, description="Limit the day-off reduction to one member"),
    db: AsyncSession = Depends(get_db),
    config: AggregationConfig = Depends(get_aggregation_config),
    adjuster: DayOffAdjuster = Depends(get_day_off_adjuster)
):
    """
    Aggregated dashboard.

    Returns:
    - Team summary and per-assignee rollups
    - Daily trend over the window
    - Leaderboard, due-date stats and tool mix
    - Day-off target reduction next to the team target
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")

    window = resolve_window(config, week_start, start_date, end_date, time_range)
    task_filter = TaskFilter(window=window, assignees=assignees, categories=categories, status=status)

    logger.info(
        f"[{request_id}] GET /dashboard - window={window.start}..{window.end}, "
        f"assignees={len(task_filter.assignees)}, categories={len(task_filter.categories)}, status={status.value}"
    )

    tasks = await list_tasks(db)
    targets = await list_targets(db)
    day_offs = await list_day_offs(db, assignee_email=day_off_email, start=window.start, end=window.end)

    viewer = Viewer(name=viewer_name, role=viewer_role) if viewer_name or viewer_role else None

    return TaskAggregator(config).build_dashboard(
        tasks,
        targets,
        task_filter,
        viewer=viewer,
        ranking=ranking,
        strategy=team_target_strategy,
        target_reduction=adjuster.reduction(day_offs, window.start, window.end)
    )
