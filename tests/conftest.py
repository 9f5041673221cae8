"""
Pytest configuration and fixtures
"""

import os

# Settings are read at import time; point them at in-memory SQLite and keep
# the scheduler off before any application module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SYNC_SCHEDULER_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from datetime import date, datetime, timezone
from typing import Any, AsyncGenerator, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from ingestion.base import TaskSource
from models.base import Base, TaskStatus
from models.task import Task
from schemas.task import TaskPage

# Register every table on the metadata
import models.task  # noqa: F401
import models.sync_run  # noqa: F401
import models.weekly_target  # noqa: F401
import models.day_off  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """In-memory database shared by every connection of one test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session


# ============================================================================
# Raw Asana data
# ============================================================================

def make_asana_task(
    gid: Optional[str],
    name: str = "Task",
    completed: bool = False,
    completed_at: Optional[str] = None,
    due_on: Optional[str] = None,
    assignee: Optional[str] = "Ana",
    email: Optional[str] = None,
    category: Optional[str] = None,
    quantity: Optional[float] = None,
    tool: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Build a raw task the way the Asana tasks endpoint returns it"""
    custom_fields = []
    if category is not None:
        custom_fields.append({
            "name": "Video Type",
            "enum_value": {"name": category},
            "display_value": category,
            "number_value": None,
        })
    if quantity is not None:
        custom_fields.append({
            "name": "Quantity",
            "enum_value": None,
            "display_value": str(quantity),
            "number_value": quantity,
        })
    if tool is not None:
        custom_fields.append({
            "name": "CTST",
            "enum_value": {"name": tool},
            "display_value": tool,
            "number_value": None,
        })

    task = {
        "gid": gid,
        "name": name,
        "notes": "",
        "completed": completed,
        "completed_at": completed_at,
        "due_on": due_on,
        "assignee": {"gid": "u1", "name": assignee, "email": email} if assignee else None,
        "custom_fields": custom_fields,
        "tags": [{"name": t} for t in (tags or [])],
    }
    if gid is None:
        del task["gid"]
    return task


@pytest.fixture
def asana_task():
    """Factory for raw Asana tasks"""
    return make_asana_task


@pytest.fixture
def ana_raw_tasks():
    """The three-task Ana scenario"""
    return [
        make_asana_task("T1", "Teaser", completed=True, completed_at="2025-06-02T09:00:00.000Z", category="S2A"),
        make_asana_task("T2", "Reels", completed=True, completed_at="2025-06-03T15:30:00.000Z", category="S4", quantity=2),
        make_asana_task("T3", "Launch film", completed=False, category="S1"),
    ]


# ============================================================================
# Normalized tasks (for aggregator tests)
# ============================================================================

def make_task(
    external_id: str,
    assignee_name: Optional[str] = "Ana",
    status: TaskStatus = TaskStatus.DONE,
    completed: Optional[date] = None,
    due_date: Optional[date] = None,
    category: Optional[str] = "S1",
    quantity: int = 1,
    points: float = 3.0,
    tool: Optional[str] = None,
) -> Task:
    """Unsaved Task row; ``completed`` becomes a UTC midday timestamp"""
    completed_at = None
    if completed is not None:
        completed_at = datetime(completed.year, completed.month, completed.day, 12, 0, tzinfo=timezone.utc)
    return Task(
        external_id=external_id,
        name=f"Task {external_id}",
        assignee_name=assignee_name,
        status=status,
        completed_at=completed_at,
        due_date=due_date,
        category=category,
        quantity=quantity,
        points=points,
        tool=tool,
        tags=[],
    )


@pytest.fixture
def task_factory():
    """Factory for unsaved Task rows"""
    return make_task


# ============================================================================
# Task sources
# ============================================================================

class StubSource(TaskSource):
    """
    In-memory task source.

    ``pages`` is a list of record lists; an Exception in place of a page is
    raised when that page is requested.
    """

    def __init__(self, pages: List[Any], **kwargs):
        super().__init__(source_name="stub", **kwargs)
        self.pages = pages
        self.requested_offsets: List[Optional[str]] = []

    async def fetch_page(self, offset: Optional[str] = None) -> TaskPage:
        self.requested_offsets.append(offset)
        index = int(offset) if offset else 0
        page = self.pages[index]
        if isinstance(page, Exception):
            raise page
        next_offset = str(index + 1) if index + 1 < len(self.pages) else None
        return TaskPage(records=page, next_offset=next_offset)


@pytest.fixture
def stub_source():
    """Factory for in-memory task sources"""
    return StubSource
