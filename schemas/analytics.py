"""
Pydantic schemas for aggregated dashboard views
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date
from schemas.task import TaskSummary
import enum


# ============================================================================
# Enums
# ============================================================================

class StatusFilter(str, enum.Enum):
    """Task status selection for filtering"""
    ALL = "all"
    DONE = "done"
    NOT_DONE = "not_done"


class RankingMode(str, enum.Enum):
    """Leaderboard ordering"""
    WEEKS_ACHIEVED = "weeks_achieved"  # weeks achieved desc, points desc, name
    PERCENT = "percent"  # percent of target desc, name


class TeamTargetStrategy(str, enum.Enum):
    """How the team-level target is computed"""
    SUM_OF_MEMBERS = "sum_of_members"  # sum of per-assignee weekly targets
    FIXED_PER_WEEK = "fixed_per_week"  # default weekly target x weeks x members


class TimeRange(str, enum.Enum):
    """Trailing windows ending today"""
    ONE_MONTH = "1month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"


# ============================================================================
# Rollups
# ============================================================================

class AssigneeRollup(BaseModel):
    """Per-assignee totals over in-scope done tasks"""
    name: str
    points: float = 0.0
    videos: int = 0
    target: float = 0.0
    percent: float = 0.0
    category_mix: Dict[str, int] = Field(default_factory=dict)
    weeks_achieved: int = 0
    total_weeks: int = 0
    done_tasks: int = 0
    not_done_tasks: int = 0


class TeamSummary(BaseModel):
    """Team-level KPIs"""
    total_points: float = 0.0
    total_videos: int = 0
    done_tasks: int = 0
    not_done_tasks: int = 0
    active_assignees: int = 0
    avg_points_per_video: float = 0.0
    team_target: float = 0.0
    team_achieved_percent: float = 0.0
    weeks_in_window: int = 1
    target_strategy: TeamTargetStrategy = TeamTargetStrategy.SUM_OF_MEMBERS

    class Config:
        use_enum_values = True


class DailyPoint(BaseModel):
    """Points and done-task count for one day"""
    day: date
    label: str
    points: float = 0.0
    tasks: int = 0


class LeaderboardEntry(BaseModel):
    """Ranked assignee"""
    rank: int
    name: str
    points: float
    target: float
    percent: float
    weeks_achieved: int
    total_weeks: int


class DueDateStat(BaseModel):
    """On-time versus late completions for one assignee"""
    name: str
    total: int = 0
    on_time: int = 0
    late: int = 0
    on_time_rate: float = 0.0
    late_rate: float = 0.0


class DueDateSummary(BaseModel):
    """All due-date stats plus best and worst performers"""
    stats: List[DueDateStat] = Field(default_factory=list)
    best: List[DueDateStat] = Field(default_factory=list)
    worst: List[DueDateStat] = Field(default_factory=list)


class ToolUsage(BaseModel):
    """Share of done tasks that used a creative tool"""
    tool: str
    count: int
    percent: float


class StatusBreakdown(BaseModel):
    done: int = 0
    not_done: int = 0


class DashboardView(BaseModel):
    """Everything the dashboard renders for one filter selection"""
    window_start: date
    window_end: date
    ranking: RankingMode
    summary: TeamSummary
    assignees: List[AssigneeRollup] = Field(default_factory=list)
    daily: List[DailyPoint] = Field(default_factory=list)
    leaderboard: List[LeaderboardEntry] = Field(default_factory=list)
    due_dates: DueDateSummary = Field(default_factory=DueDateSummary)
    tool_mix: List[ToolUsage] = Field(default_factory=list)
    status: StatusBreakdown = Field(default_factory=StatusBreakdown)
    done_tasks: List[TaskSummary] = Field(default_factory=list)
    not_done_tasks: List[TaskSummary] = Field(default_factory=list)
    available_assignees: List[str] = Field(default_factory=list)
    available_categories: List[str] = Field(default_factory=list)
    target_reduction: float = 0.0
    adjusted_team_target: float = 0.0
    viewer_scoped: bool = False
    viewer_name: Optional[str] = None

    class Config:
        use_enum_values = True
