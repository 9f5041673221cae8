"""
SQLAlchemy ORM models for database tables.

This package defines the database schema using SQLAlchemy ORM models:

Models:
    base: Base declarative class, shared enums (TaskStatus, SyncStatus) and the JSON column type
    task: Normalized tasks synced from the task source (one row per external id)
    sync_run: Sync execution log
    weekly_target: Per-assignee, per-week point goals
    day_off: Registered member absences

Database Schema:
    All models inherit from the Base declarative class. JSON columns map to
    JSONB on PostgreSQL and to plain JSON on other dialects.

Usage:
    from models.task import Task
    from models.sync_run import SyncRun
    from models.base import TaskStatus, SyncStatus

Example:
    # Read every done task
    result = await session.execute(
        select(Task).where(Task.status == TaskStatus.DONE)
    )
    tasks = result.scalars().all()
"""

__all__ = [
    "base",
    "task",
    "sync_run",
    "weekly_target",
    "day_off",
]
