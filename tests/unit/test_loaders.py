"""
Unit tests for the task loader (idempotent upsert)
"""

import pytest
from sqlalchemy import select, func
from core.exceptions import UpsertError
from ingestion.loaders.task_loader import TaskLoader
from models.task import Task
from schemas.task import TaskCreate


def task_create(external_id, **overrides):
    values = {"external_id": external_id, "name": f"Task {external_id}", "category": "S1", "quantity": 1, "points": 3.0}
    values.update(overrides)
    return TaskCreate(**values)


async def count_rows(session):
    result = await session.execute(select(func.count()).select_from(Task))
    return result.scalar()


class TestTaskLoader:
    """Upsert keyed by external_id"""

    @pytest.mark.asyncio
    async def test_insert_new_tasks(self, db_session):
        loader = TaskLoader(db_session)

        updated, failed = await loader.load([task_create("1"), task_create("2")])

        assert updated == 2
        assert failed == []
        assert await count_rows(db_session) == 2

    @pytest.mark.asyncio
    async def test_upsert_overwrites_existing(self, db_session, session_factory):
        loader = TaskLoader(db_session)
        await loader.load([task_create("1", name="Draft", status="not_done")])
        await loader.load([task_create("1", name="Final", status="done", category="S4", quantity=2, points=10.0)])

        async with session_factory() as fresh:
            rows = (await fresh.execute(select(Task))).scalars().all()

        assert len(rows) == 1
        assert rows[0].name == "Final"
        assert rows[0].status == "done"
        assert rows[0].category == "S4"
        assert rows[0].quantity == 2
        assert rows[0].points == 10.0

    @pytest.mark.asyncio
    async def test_repeated_load_creates_no_duplicates(self, db_session):
        loader = TaskLoader(db_session)
        batch = [task_create(str(i)) for i in range(5)]

        for _ in range(3):
            await loader.load(batch)

        assert await count_rows(db_session) == 5

    @pytest.mark.asyncio
    async def test_failing_record_is_skipped(self, db_session):
        loader = TaskLoader(db_session)
        # Bypasses validation so the NOT NULL name fails in the database
        broken = TaskCreate.construct(external_id="bad", name=None, quantity=1, points=0.0)

        updated, failed = await loader.load([task_create("1"), broken, task_create("2")])

        assert updated == 2
        assert failed == ["bad"]
        assert await count_rows(db_session) == 2

    @pytest.mark.asyncio
    async def test_upsert_raises_upsert_error(self, db_session):
        loader = TaskLoader(db_session)
        broken = TaskCreate.construct(external_id="bad", name=None, quantity=1, points=0.0)

        with pytest.raises(UpsertError) as exc_info:
            await loader.upsert(broken)

        assert exc_info.value.context["external_id"] == "bad"
