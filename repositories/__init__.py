"""
Async data access for routes, the sync runner and scripts.

Each module wraps the queries for one table so that routes stay thin and
the same statements are shared between the API and the CLI.

Modules:
    tasks: Task snapshot reads for the aggregator
    sync_runs: Sync run lifecycle (create, finalize) and history reads
    targets: Weekly target reads and replace-all writes
    day_offs: Day-off list, add and delete

Usage:
    from repositories import sync_runs, targets
    runs = await sync_runs.recent_sync_runs(session, limit=5)
"""

__all__ = [
    "tasks",
    "sync_runs",
    "targets",
    "day_offs",
]
