"""
Pydantic schemas for normalized tasks with validation
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import datetime, date
from models.base import TaskStatus


class TaskCreate(BaseModel):
    """
    Schema for a normalized task ready to be upserted.

    Ensures:
    - external_id is present (upsert conflict target)
    - quantity is at least 1
    - points are never negative
    """

    # Source identity (required)
    external_id: str = Field(..., min_length=1, max_length=64)

    # Passthrough fields
    name: str = Field(..., max_length=1024)
    description: Optional[str] = None
    assignee_name: Optional[str] = Field(None, max_length=200)
    assignee_email: Optional[str] = Field(None, max_length=320)

    status: TaskStatus = TaskStatus.NOT_DONE
    completed_at: Optional[datetime] = None
    due_date: Optional[date] = None

    # Derived fields
    category: Optional[str] = Field(None, max_length=50)
    quantity: int = Field(1, ge=1)
    points: float = Field(0.0, ge=0)
    tool: Optional[str] = Field(None, max_length=200)

    # Flexible fields
    tags: List[str] = Field(default_factory=list)
    raw_payload: Optional[Dict[str, Any]] = None

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @validator("tags", pre=True)
    def clean_tags(cls, v):
        """Ensure tags is a list of non-empty strings"""
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        if isinstance(v, list):
            return [str(t).strip() for t in v if t is not None and str(t).strip()]
        return []

    class Config:
        use_enum_values = True


class TaskSummary(BaseModel):
    """Lightweight task row for dashboard tables"""
    external_id: str
    name: str
    assignee_name: Optional[str] = None
    status: TaskStatus
    category: Optional[str] = None
    quantity: int = 1
    points: float = 0.0
    tool: Optional[str] = None
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True


class TaskPage(BaseModel):
    """
    One page of raw tasks from the source plus its continuation token.

    Records are not validated here; malformed ones are skipped per record
    during normalization.
    """
    records: List[Any] = Field(default_factory=list)
    next_offset: Optional[str] = None
