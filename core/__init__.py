"""
Core utilities and configuration for the team points backend.

This package provides foundational components used throughout the service:

Modules:
    config: Application configuration and environment variable management
    database: Database engine and session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities
    points: Category point table (category code -> point weight)

Usage:
    from core.config import settings
    from core.database import get_session
    from core.exceptions import SourceError, NetworkError
    from core.logging import setup_logging
    from core.points import CategoryPointTable

Example:
    # Initialize logging
    setup_logging()

    # Score a task
    table = CategoryPointTable(settings.CATEGORY_POINTS)
    table.points_for("S4", 2)  # 10.0
"""

__all__ = [
    "config",
    "database",
    "exceptions",
    "logging",
    "points",
]
