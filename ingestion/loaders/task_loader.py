"""
Load normalized tasks with upsert logic (idempotency)
"""

from typing import Iterable, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.dialects import postgresql, sqlite
from models.task import Task
from schemas.task import TaskCreate
from core.exceptions import UpsertError
import logging

logger = logging.getLogger(__name__)

# Every column the source owns; created_at keeps its first-seen value
UPSERT_FIELDS = (
    "name",
    "description",
    "assignee_name",
    "assignee_email",
    "status",
    "completed_at",
    "due_date",
    "category",
    "quantity",
    "points",
    "tool",
    "tags",
    "raw_payload",
    "updated_at",
)

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class TaskLoader:
    """
    Upsert tasks keyed by external_id.

    Ensures:
    - Exactly one row per external_id across repeated syncs
    - Existing rows are overwritten with the latest source values
    - One transaction per task, so a failing task never rolls back others
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERTS[dialect]
        except KeyError:
            raise UpsertError(
                f"Upsert is not supported on dialect {dialect!r}",
                context={"dialect": dialect, "operation": "UPSERT"}
            )

    async def upsert(self, task: TaskCreate) -> None:
        """
        Insert or overwrite a single task and commit.

        Raises:
            UpsertError: When the statement or commit fails (already rolled back)
        """
        values = task.dict()
        stmt = self._insert()(Task).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["external_id"],
            set_={name: stmt.excluded[name] for name in UPSERT_FIELDS}
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                f"Failed to upsert task {task.external_id}",
                context={"external_id": task.external_id, "operation": "UPSERT", "table_name": "tasks"},
                original_exception=e
            )

    async def load(self, tasks: Iterable[TaskCreate]) -> Tuple[int, List[str]]:
        """
        Upsert every task, skipping the ones that fail.

        Returns:
            (number of successful upserts, external ids that failed)
        """
        updated = 0
        failed: List[str] = []

        for task in tasks:
            try:
                await self.upsert(task)
                updated += 1
            except UpsertError as e:
                failed.append(task.external_id)
                logger.error(
                    f"Skipping task {task.external_id}: {e.message}",
                    extra={"error_context": e.to_dict()}
                )

        logger.info(f"Upserted {updated} tasks ({len(failed)} skipped)")
        return updated, failed
