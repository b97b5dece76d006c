"""Task repository (read-only catalog access)."""

from typing import List, Optional

import aiosqlite

from src.core.config import settings
from src.core.exceptions import PersistenceError
from src.domain.models.task import Task


class TaskRepository:
    """Read-only lookups against the pre-seeded tasks table."""

    def __init__(self, db_path: str, timeout: Optional[float] = None):
        self.db_path = db_path
        self.timeout = timeout or settings.database_timeout_seconds

    async def get(self, task_id: int) -> Optional[Task]:
        """Get a task by id, or None if it is not in the catalog."""
        try:
            async with aiosqlite.connect(self.db_path, timeout=self.timeout) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    "SELECT id, name, description FROM tasks WHERE id = ?", (task_id,)
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to load task {task_id}: {e}") from e

        if not row:
            return None
        return Task(id=row["id"], name=row["name"], description=row["description"])

    async def list_all(self) -> List[Task]:
        """All tasks ordered by id."""
        try:
            async with aiosqlite.connect(self.db_path, timeout=self.timeout) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    "SELECT id, name, description FROM tasks ORDER BY id ASC"
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to load tasks: {e}") from e
        return [
            Task(id=row["id"], name=row["name"], description=row["description"])
            for row in rows
        ]
