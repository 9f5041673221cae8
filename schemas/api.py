"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from models.base import SyncStatus
import datetime as dt


# ============================================================================
# Sync Schemas
# ============================================================================

class SyncResult(BaseModel):
    """Outcome of one successful sync run"""
    success: bool = True
    tasks_processed: int = 0
    tasks_updated: int = 0
    duration_ms: int = 0
    sync_run_id: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "tasks_processed": 240,
                "tasks_updated": 240,
                "duration_ms": 5310,
                "sync_run_id": 17
            }
        }


class SyncRunSummary(BaseModel):
    """One sync run as stored"""
    id: int
    status: SyncStatus
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
    tasks_processed: int = 0
    tasks_updated: int = 0
    error_message: Optional[str] = None

    class Config:
        from_attributes = True
        use_enum_values = True


class SyncStatusResponse(BaseModel):
    """Most recent sync runs, newest first"""
    runs: List[SyncRunSummary] = Field(default_factory=list)
    is_running: bool = False


# ============================================================================
# Weekly Target Schemas
# ============================================================================

class WeeklyTargetIn(BaseModel):
    """A single (assignee, week) target"""
    assignee_name: str = Field(..., min_length=1, max_length=200)
    week_start_date: dt.date
    target_points: float = Field(..., ge=0)

    @validator("assignee_name")
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("assignee_name must not be blank")
        return v


class WeeklyTargetOut(WeeklyTargetIn):
    id: int

    class Config:
        from_attributes = True


class TargetsReplaceRequest(BaseModel):
    """Full replacement set for the weekly target table"""
    targets: List[WeeklyTargetIn] = Field(default_factory=list)

    @validator("targets")
    def unique_pairs(cls, v):
        seen = set()
        for target in v:
            key = (target.assignee_name, target.week_start_date)
            if key in seen:
                raise ValueError(
                    f"duplicate target for {target.assignee_name} "
                    f"in week {target.week_start_date.isoformat()}"
                )
            seen.add(key)
        return v


class TargetsResponse(BaseModel):
    targets: List[WeeklyTargetOut] = Field(default_factory=list)
    total: int = 0


# ============================================================================
# Day-Off Schemas
# ============================================================================

class DayOffCreate(BaseModel):
    """Register a day off"""
    assignee_email: str = Field(..., min_length=3, max_length=320)
    date: dt.date
    is_half_day: bool = False
    reason: Optional[str] = Field(None, max_length=500)

    @validator("assignee_email")
    def normalize_email(cls, v):
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("assignee_email must be an email address")
        return v


class DayOffResponse(BaseModel):
    id: int
    assignee_email: str
    date: dt.date
    is_half_day: bool
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DayOffListResponse(BaseModel):
    """Day-offs in a period plus the target reduction they imply"""
    day_offs: List[DayOffResponse] = Field(default_factory=list)
    full_days: int = 0
    half_days: int = 0
    target_reduction: float = 0.0


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    total_tasks: int = 0
    last_sync: Optional[SyncRunSummary] = None

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2025-06-02T10:30:00Z",
                "database_connected": True,
                "total_tasks": 240,
                "last_sync": {
                    "id": 17,
                    "status": "success",
                    "started_at": "2025-06-02T10:00:00Z",
                    "ended_at": "2025-06-02T10:00:05Z",
                    "duration_ms": 5310,
                    "tasks_processed": 240,
                    "tasks_updated": 240
                }
            }
        }


class ErrorResponse(BaseModel):
    """Error body returned by failing endpoints"""
    error: str
    details: Optional[Dict[str, Any]] = None
