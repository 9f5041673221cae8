from sqlalchemy import Column, BigInteger, Integer, Enum, DateTime, Text, Index
from datetime import datetime
from models.base import Base, SyncStatus, enum_values


class SyncRun(Base):
    """
    One row per synchronization attempt against the task source.

    Lifecycle:
    - Inserted with status=running when a sync starts
    - Finalized exactly once with status=success or status=error
    - Never modified after finalization
    """
    __tablename__ = "sync_runs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    status = Column(
        Enum(SyncStatus, name="sync_status", values_callable=enum_values),
        default=SyncStatus.RUNNING,
        nullable=False,
        index=True
    )

    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow, index=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    duration_ms = Column(Integer, nullable=True)

    # Statistics
    tasks_processed = Column(Integer, nullable=False, default=0)
    tasks_updated = Column(Integer, nullable=False, default=0)

    # Error tracking
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_sync_run_status_started", "status", "started_at"),
    )
