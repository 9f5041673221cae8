from sqlalchemy import Column, BigInteger, Integer, String, Enum, Text, Float, Date, DateTime, Index
from datetime import datetime
from models.base import Base, JSONType, TaskStatus, enum_values


class Task(Base):
    """
    Normalized task synced from the project-management source.

    Field Mapping Strategy (Asana):
    - gid -> external_id (upsert conflict target)
    - name -> name
    - notes -> description
    - assignee.name / assignee.email -> assignee_name / assignee_email
    - completed -> status (done / not_done)
    - completed_at -> completed_at
    - due_on -> due_date
    - custom field "Video Type" -> category
    - custom field "Quantity" -> quantity
    - custom field "CTST" -> tool
    - weight(category) x quantity -> points
    - tags[].name -> tags
    - full task -> raw_payload
    """
    __tablename__ = "tasks"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    # Source identity
    external_id = Column(String(64), nullable=False, unique=True, index=True)

    # Passthrough fields
    name = Column(String(1024), nullable=False)
    description = Column(Text, nullable=True)
    assignee_name = Column(String(200), nullable=True, index=True)
    assignee_email = Column(String(320), nullable=True, index=True)

    status = Column(
        Enum(TaskStatus, name="task_status", values_callable=enum_values),
        nullable=False,
        default=TaskStatus.NOT_DONE,
        index=True
    )
    completed_at = Column(DateTime(timezone=True), nullable=True, index=True)
    due_date = Column(Date, nullable=True)

    # Derived fields
    category = Column(String(50), nullable=True, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    points = Column(Float, nullable=False, default=0.0)
    tool = Column(String(200), nullable=True)

    # Flexible fields
    tags = Column(JSONType, nullable=True)
    raw_payload = Column(JSONType, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_task_assignee_status", "assignee_name", "status"),
        Index("idx_task_status_completed", "status", "completed_at"),
    )
