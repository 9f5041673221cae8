"""
Sync pipeline components for pulling tasks from Asana.

Modules:
    base: Abstract task source with bounded offset pagination
    runner: Sync orchestrator (fetch, normalize, upsert, run log)
    scheduler: APScheduler integration for periodic syncs

Subpackages:
    extractors: Asana REST client with retry and error mapping
    transformers: Custom-field rules and task normalization with point scoring
    loaders: Idempotent per-task upsert keyed by external_id

Architecture:
    A sync runs in three phases:

    1. Fetch - Page through the project; any source error aborts the run
       before a single task is written
    2. Normalize - Derive category, quantity, tool and points per task;
       unusable records are skipped
    3. Upsert - One transaction per task so a bad row never blocks the rest

    Every run is recorded in sync_runs and finalized exactly once.

Usage:
    from ingestion.extractors.asana_extractor import AsanaExtractor
    from ingestion.runner import SyncRunner

    async with AsanaExtractor.from_settings(settings) as source:
        result = await SyncRunner(session, source).run()

    print(f"Updated {result.tasks_updated} tasks")

Error Handling:
    All components raise the structured exceptions in core.exceptions.
"""

__all__ = [
    "base",
    "runner",
    "scheduler",
]
