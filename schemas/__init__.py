"""
Pydantic schemas for data validation and serialization.

This package defines Pydantic models for request/response validation and
for the data passed between sync and aggregation stages:

Schemas:
    task: Normalized task (TaskCreate), table row (TaskSummary) and source page (TaskPage)
    analytics: Filter enums and every dashboard view model
    api: Sync, target, day-off and health endpoint request/response schemas

Usage:
    from schemas.task import TaskCreate
    from schemas.analytics import DashboardView, RankingMode
    from schemas.api import SyncResult, DayOffCreate

Example:
    task = TaskCreate(external_id="1201", name="Launch teaser", category="S4", quantity=2, points=10.0)
    assert task.status == "not_done"

Validation:
    quantity is at least 1, points are never negative, and target and
    day-off payloads are checked before they reach the database.
"""

__all__ = [
    "task",
    "analytics",
    "api",
]
