"""
Dashboard analytics computed from a task snapshot.

Everything here is pure: no database access and no I/O. Routes load tasks,
targets and day-offs, then hand them to these modules.

Modules:
    weeks: Week bucketing and calendar helpers
    filters: DateWindow and TaskFilter (assignee, category, status, window)
    aggregator: TaskAggregator, AggregationConfig and Viewer
    day_off: Target reduction for days off (32 per full day, 16 per half day)

Usage:
    from analytics.filters import DateWindow, TaskFilter
    from analytics.aggregator import AggregationConfig, TaskAggregator

Example:
    window = DateWindow.for_week(date(2025, 6, 4))
    view = TaskAggregator().build_dashboard(tasks, targets, TaskFilter(window=window))
    print(view.summary.total_points)
"""

__all__ = [
    "weeks",
    "filters",
    "aggregator",
    "day_off",
]
