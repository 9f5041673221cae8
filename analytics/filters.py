"""
Filter criteria for the task aggregator.

Filtering happens in two steps:

1. Assignee, category and status predicates (empty selection = no filtering)
2. Date window, which only applies to done tasks: a done task is kept when
   its completion date falls inside the window, a not-done task is always
   kept because it is current backlog regardless of when it was created.
"""

from pydantic import BaseModel, Field, validator
from typing import Any, Iterable, List, Optional
from datetime import date, timedelta
from analytics.weeks import days_between, subtract_months, to_date, week_start_for, weeks_spanned
from core.exceptions import FilterValidationError
from models.base import TaskStatus
from schemas.analytics import StatusFilter, TimeRange

TIME_RANGE_MONTHS = {
    TimeRange.ONE_MONTH: 1,
    TimeRange.THREE_MONTHS: 3,
    TimeRange.SIX_MONTHS: 6,
}


class DateWindow(BaseModel):
    """Inclusive [start, end] date range"""
    start: date
    end: date

    @validator("end")
    def end_not_before_start(cls, v, values):
        start = values.get("start")
        if start is not None and v < start:
            raise FilterValidationError(
                "end date must not be before start date",
                context={"field_name": "end", "start": start.isoformat(), "end": v.isoformat()}
            )
        return v

    @classmethod
    def for_week(cls, day: date, week_start_day: int = 0) -> "DateWindow":
        """The 7-day week containing ``day``, starting on ``week_start_day``."""
        if not 0 <= week_start_day <= 6:
            raise FilterValidationError(
                "week_start_day must be between 0 (Monday) and 6 (Sunday)",
                context={"field_name": "week_start_day", "field_value": week_start_day}
            )
        start = week_start_for(day, week_start_day)
        return cls(start=start, end=start + timedelta(days=6))

    @classmethod
    def for_time_range(cls, time_range: TimeRange, today: date) -> "DateWindow":
        """Trailing window of 1, 3 or 6 months ending today."""
        months = TIME_RANGE_MONTHS[TimeRange(time_range)]
        return cls(start=subtract_months(today, months), end=today)

    def contains(self, day: Optional[date]) -> bool:
        return day is not None and self.start <= day <= self.end

    def days(self) -> List[date]:
        return days_between(self.start, self.end)

    def weeks(self) -> int:
        return weeks_spanned(self.start, self.end)


class TaskFilter(BaseModel):
    """Selection applied to the task collection before aggregation"""
    window: DateWindow
    assignees: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    status: StatusFilter = StatusFilter.ALL

    @validator("assignees", "categories", pre=True)
    def drop_blank(cls, v):
        if v is None:
            return []
        return [item for item in v if item is not None and str(item).strip()]

    @validator("categories")
    def category_codes(cls, v):
        """Category codes compare case-insensitively, like point table lookups."""
        return [str(code).strip().upper() for code in v]

    def matches_attributes(self, task: Any) -> bool:
        """Assignee, category and status predicates."""
        if self.assignees and (task.assignee_name or "") not in self.assignees:
            return False
        if self.categories and (task.category or "").strip().upper() not in self.categories:
            return False
        if self.status == StatusFilter.DONE and task.status != TaskStatus.DONE:
            return False
        if self.status == StatusFilter.NOT_DONE and task.status != TaskStatus.NOT_DONE:
            return False
        return True

    def matches_window(self, task: Any) -> bool:
        """Done tasks are time-scoped; backlog is not."""
        if task.status == TaskStatus.DONE:
            return self.window.contains(to_date(task.completed_at))
        return True

    def apply_attributes(self, tasks: Iterable[Any]) -> List[Any]:
        return [task for task in tasks if self.matches_attributes(task)]

    def apply(self, tasks: Iterable[Any]) -> List[Any]:
        return [task for task in self.apply_attributes(tasks) if self.matches_window(task)]
