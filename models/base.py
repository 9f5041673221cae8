from sqlalchemy import JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import JSONB
import enum

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ============================================================================
# ENUMS
# ============================================================================

class TaskStatus(str, enum.Enum):
    """Normalized task completion status"""
    DONE = "done"
    NOT_DONE = "not_done"


class SyncStatus(str, enum.Enum):
    """Sync run status"""
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


def enum_values(enum_cls):
    """Persist enum values ("done") rather than member names ("DONE")."""
    return [member.value for member in enum_cls]
