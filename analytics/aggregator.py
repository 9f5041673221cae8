"""
Task aggregator: derives every dashboard view from a task snapshot.

Pure computation over in-memory objects. Inputs are ORM rows or any object
exposing the same attributes; they are never mutated.

Views:
- Per-assignee rollups (points, videos, target, weeks achieved)
- Team summary with a selectable team-target strategy
- Daily trend over the window
- Leaderboard in two ranking modes
- On-time / late statistics
- Tool usage mix and status breakdown
"""

from collections import defaultdict
from datetime import date
from pydantic import BaseModel, validator
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging

from analytics.filters import DateWindow, TaskFilter
from analytics.weeks import to_date, week_start_for
from models.base import TaskStatus
from schemas.analytics import (
    AssigneeRollup,
    DailyPoint,
    DashboardView,
    DueDateStat,
    DueDateSummary,
    LeaderboardEntry,
    RankingMode,
    StatusBreakdown,
    TeamSummary,
    TeamTargetStrategy,
    ToolUsage,
)
from schemas.task import TaskSummary

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MEMBER_ROLE = "member"
PERFORMER_LIST_SIZE = 3


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


class AggregationConfig(BaseModel):
    """Business constants read once from settings"""
    week_start_day: int = 0
    weekly_target_default: float = 160.0
    team_target_strategy: TeamTargetStrategy = TeamTargetStrategy.SUM_OF_MEMBERS
    ranking_mode: RankingMode = RankingMode.WEEKS_ACHIEVED
    leaderboard_size: int = 10

    @validator("week_start_day")
    def valid_weekday(cls, v):
        if not 0 <= v <= 6:
            raise ValueError("week_start_day must be between 0 and 6")
        return v

    @validator("leaderboard_size")
    def positive_size(cls, v):
        if v < 1:
            raise ValueError("leaderboard_size must be at least 1")
        return v

    @classmethod
    def from_settings(cls, settings) -> "AggregationConfig":
        return cls(
            week_start_day=settings.WEEK_START_DAY,
            weekly_target_default=settings.WEEKLY_TARGET_DEFAULT,
            team_target_strategy=settings.TEAM_TARGET_STRATEGY,
            ranking_mode=settings.LEADERBOARD_RANKING,
            leaderboard_size=settings.LEADERBOARD_SIZE,
        )


class Viewer(BaseModel):
    """
    Who is looking at the dashboard.

    A member with a name only sees their own rollup, leaderboard entry and
    due-date stats. Everyone else gets the manager view.
    """
    name: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_manager(self) -> bool:
        if not self.name or not self.name.strip():
            return True
        return (self.role or "").strip().lower() != MEMBER_ROLE


class TaskAggregator:
    """
    Computes dashboard views for one filter selection.

    Example:
        aggregator = TaskAggregator(AggregationConfig.from_settings(settings))
        view = aggregator.build_dashboard(tasks, targets, task_filter)
    """

    def __init__(self, config: Optional[AggregationConfig] = None):
        self.config = config or AggregationConfig()

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def filter(self, tasks: Iterable[Any], task_filter: TaskFilter) -> List[Any]:
        return task_filter.apply(tasks)

    @staticmethod
    def _done(tasks: Iterable[Any]) -> List[Any]:
        return [t for t in tasks if t.status == TaskStatus.DONE]

    # ------------------------------------------------------------------
    # Per-assignee
    # ------------------------------------------------------------------

    def weekly_points(self, done_tasks: Iterable[Any]) -> Dict[date, float]:
        """Points per week bucket, keyed by the week's first day."""
        buckets: Dict[date, float] = defaultdict(float)
        for task in done_tasks:
            completed = to_date(task.completed_at)
            if completed is None:
                continue
            buckets[week_start_for(completed, self.config.week_start_day)] += task.points or 0.0
        return dict(buckets)

    def target_for(self, name: str, targets: Iterable[Any], window: DateWindow) -> float:
        return sum(
            t.target_points or 0.0
            for t in targets
            if t.assignee_name == name and window.contains(to_date(t.week_start_date))
        )

    def rollups(
        self,
        tasks: Sequence[Any],
        targets: Sequence[Any],
        task_filter: TaskFilter
    ) -> List[AssigneeRollup]:
        """
        One rollup per assignee with any signal, sorted by name.

        Weeks achieved is counted before the date window so it reflects
        every week in the data, not just the selected one.
        """
        pre_window = task_filter.apply_attributes(tasks)
        in_scope = [t for t in pre_window if task_filter.matches_window(t)]

        names = {t.assignee_name for t in tasks if t.assignee_name}
        if task_filter.assignees:
            names &= set(task_filter.assignees)

        rollups = []
        for name in sorted(names):
            done = [t for t in in_scope if t.assignee_name == name and t.status == TaskStatus.DONE]
            not_done = [t for t in in_scope if t.assignee_name == name and t.status == TaskStatus.NOT_DONE]

            points = sum(t.points or 0.0 for t in done)
            videos = sum(t.quantity or 0 for t in done)
            target = self.target_for(name, targets, task_filter.window)

            if points == 0 and videos == 0 and target == 0:
                continue

            category_mix: Dict[str, int] = defaultdict(int)
            for task in done:
                if task.category:
                    category_mix[task.category] += task.quantity or 0

            weekly = self.weekly_points(
                t for t in pre_window if t.assignee_name == name and t.status == TaskStatus.DONE
            )
            achieved = sum(1 for total in weekly.values() if total >= self.config.weekly_target_default)

            rollups.append(AssigneeRollup(
                name=name,
                points=points,
                videos=videos,
                target=target,
                percent=round(_percent(points, target), 1),
                category_mix=dict(category_mix),
                weeks_achieved=achieved,
                total_weeks=len(weekly),
                done_tasks=len(done),
                not_done_tasks=len(not_done),
            ))

        return rollups

    # ------------------------------------------------------------------
    # Team
    # ------------------------------------------------------------------

    def team_target(
        self,
        rollups: Sequence[AssigneeRollup],
        window: DateWindow,
        strategy: Optional[TeamTargetStrategy] = None
    ) -> float:
        strategy = TeamTargetStrategy(strategy or self.config.team_target_strategy)
        if strategy == TeamTargetStrategy.FIXED_PER_WEEK:
            return self.config.weekly_target_default * window.weeks() * len(rollups)
        return sum(r.target for r in rollups)

    def team_summary(
        self,
        in_scope: Sequence[Any],
        rollups: Sequence[AssigneeRollup],
        window: DateWindow,
        strategy: Optional[TeamTargetStrategy] = None
    ) -> TeamSummary:
        done = self._done(in_scope)
        total_points = sum(t.points or 0.0 for t in done)
        total_videos = sum(t.quantity or 0 for t in done)
        strategy = TeamTargetStrategy(strategy or self.config.team_target_strategy)
        team_target = self.team_target(rollups, window, strategy)

        return TeamSummary(
            total_points=total_points,
            total_videos=total_videos,
            done_tasks=len(done),
            not_done_tasks=len(in_scope) - len(done),
            active_assignees=len({t.assignee_name for t in done if t.assignee_name}),
            avg_points_per_video=round(total_points / total_videos, 2) if total_videos else 0.0,
            team_target=team_target,
            team_achieved_percent=round(_percent(total_points, team_target), 1),
            weeks_in_window=window.weeks(),
            target_strategy=strategy,
        )

    def daily_trend(self, in_scope: Sequence[Any], window: DateWindow) -> List[DailyPoint]:
        """Points and done-task count for every day of the window."""
        points: Dict[date, float] = defaultdict(float)
        counts: Dict[date, int] = defaultdict(int)
        for task in self._done(in_scope):
            completed = to_date(task.completed_at)
            if completed is None:
                continue
            points[completed] += task.points or 0.0
            counts[completed] += 1

        return [
            DailyPoint(day=day, label=WEEKDAY_LABELS[day.weekday()], points=points[day], tasks=counts[day])
            for day in window.days()
        ]

    # ------------------------------------------------------------------
    # Rankings
    # ------------------------------------------------------------------

    def leaderboard(
        self,
        rollups: Sequence[AssigneeRollup],
        mode: Optional[RankingMode] = None
    ) -> List[LeaderboardEntry]:
        """
        Rank rollups and keep the top ``leaderboard_size``.

        Both modes end with the assignee name so the order is total.
        """
        mode = RankingMode(mode or self.config.ranking_mode)
        default_target = self.config.weekly_target_default

        if mode == RankingMode.PERCENT:
            scored = []
            for r in rollups:
                effective = r.target or default_target
                scored.append((r, effective, _percent(r.points, effective)))
            scored.sort(key=lambda item: (-item[2], item[0].name))
        else:
            scored = [(r, r.target, r.percent) for r in rollups]
            scored.sort(key=lambda item: (-item[0].weeks_achieved, -item[0].points, item[0].name))

        return [
            LeaderboardEntry(
                rank=rank,
                name=r.name,
                points=r.points,
                target=target,
                percent=round(percent, 1),
                weeks_achieved=r.weeks_achieved,
                total_weeks=r.total_weeks,
            )
            for rank, (r, target, percent) in enumerate(scored[:self.config.leaderboard_size], start=1)
        ]

    def due_date_stats(self, in_scope: Sequence[Any]) -> DueDateSummary:
        """
        On-time versus late per assignee.

        Completing on the due date counts as on time. Tasks missing either
        date are left out entirely.
        """
        totals: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
        for task in self._done(in_scope):
            completed = to_date(task.completed_at)
            due = to_date(task.due_date)
            if not task.assignee_name or completed is None or due is None:
                continue
            counter = totals[task.assignee_name]
            if completed > due:
                counter[1] += 1
            else:
                counter[0] += 1

        stats = []
        for name in sorted(totals):
            on_time, late = totals[name]
            total = on_time + late
            stats.append(DueDateStat(
                name=name,
                total=total,
                on_time=on_time,
                late=late,
                on_time_rate=round(_percent(on_time, total), 1),
                late_rate=round(_percent(late, total), 1),
            ))

        best = sorted(stats, key=lambda s: (-s.on_time_rate, -s.total, s.name))[:PERFORMER_LIST_SIZE]
        worst = sorted(
            (s for s in stats if s.late_rate > 0),
            key=lambda s: (-s.late_rate, -s.total, s.name)
        )[:PERFORMER_LIST_SIZE]

        return DueDateSummary(stats=stats, best=best, worst=worst)

    def tool_mix(self, in_scope: Sequence[Any]) -> List[ToolUsage]:
        """Share of done tasks per creative tool, most used first."""
        done = self._done(in_scope)
        counts: Dict[str, int] = defaultdict(int)
        for task in done:
            if task.tool:
                counts[task.tool] += 1

        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [
            ToolUsage(tool=tool, count=count, percent=round(_percent(count, len(done)), 1))
            for tool, count in ordered
        ]

    # ------------------------------------------------------------------
    # Full view
    # ------------------------------------------------------------------

    def build_dashboard(
        self,
        tasks: Sequence[Any],
        targets: Sequence[Any],
        task_filter: TaskFilter,
        viewer: Optional[Viewer] = None,
        ranking: Optional[RankingMode] = None,
        strategy: Optional[TeamTargetStrategy] = None,
        target_reduction: float = 0.0
    ) -> DashboardView:
        """
        Compute every view for one filter selection.

        Args:
            tasks: Full task snapshot
            targets: Weekly target rows
            task_filter: Selection to apply
            viewer: Optional viewer; members are scoped to themselves
            ranking: Overrides the configured ranking mode
            strategy: Overrides the configured team-target strategy
            target_reduction: Day-off reduction reported next to the team target
        """
        ranking = RankingMode(ranking or self.config.ranking_mode)
        in_scope = self.filter(tasks, task_filter)

        rollups = self.rollups(tasks, targets, task_filter)
        summary = self.team_summary(in_scope, rollups, task_filter.window, strategy)

        scoped = viewer is not None and not viewer.is_manager
        scoped_rollups = rollups
        scoped_tasks = in_scope
        if scoped:
            scoped_rollups = [r for r in rollups if r.name == viewer.name]
            scoped_tasks = [t for t in in_scope if t.assignee_name == viewer.name]

        done = self._done(in_scope)

        logger.debug(
            f"Dashboard built: {len(in_scope)} tasks in scope, "
            f"{len(rollups)} assignees, ranking={ranking.value}"
        )

        return DashboardView(
            window_start=task_filter.window.start,
            window_end=task_filter.window.end,
            ranking=ranking,
            summary=summary,
            assignees=scoped_rollups,
            daily=self.daily_trend(in_scope, task_filter.window),
            leaderboard=self.leaderboard(scoped_rollups, ranking),
            due_dates=self.due_date_stats(scoped_tasks),
            tool_mix=self.tool_mix(in_scope),
            status=StatusBreakdown(done=len(done), not_done=len(in_scope) - len(done)),
            done_tasks=[TaskSummary.from_orm(t) for t in done],
            not_done_tasks=[TaskSummary.from_orm(t) for t in in_scope if t.status == TaskStatus.NOT_DONE],
            available_assignees=sorted({t.assignee_name for t in tasks if t.assignee_name}),
            available_categories=sorted({t.category for t in tasks if t.category}),
            target_reduction=target_reduction,
            adjusted_team_target=max(0.0, summary.team_target - target_reduction),
            viewer_scoped=scoped,
            viewer_name=viewer.name if scoped else None,
        )
