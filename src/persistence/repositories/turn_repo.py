"""Turn repository: the append-only conversation store."""

from datetime import datetime, timezone
from typing import List, Optional

import aiosqlite
import structlog

from src.core.config import settings
from src.core.exceptions import PersistenceError
from src.domain.models.turn import Turn

log = structlog.get_logger(__name__)


class TurnRepository:
    """Repository for the per-(user, task) ordered turn log.

    Turns are only ever appended. The next turn number is assigned inside
    the INSERT statement itself, so two concurrent submissions for the same
    (user, task) cannot both claim the same number; the
    UNIQUE(user_id, task_id, turn_number) key backs this up.
    """

    def __init__(self, db_path: str, timeout: Optional[float] = None):
        self.db_path = db_path
        self.timeout = timeout or settings.database_timeout_seconds

    def _connect(self):
        return aiosqlite.connect(self.db_path, timeout=self.timeout)

    async def count_turns(self, user_id: str, task_id: int) -> int:
        """Count stored turns for (user, task).

        Raises:
            PersistenceError: If the query fails
        """
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    "SELECT COUNT(*) FROM turns WHERE user_id = ? AND task_id = ?",
                    (user_id, task_id),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to count turns: {e}") from e
        return row[0] if row else 0

    async def append_turn(
        self,
        user_id: str,
        task_id: int,
        prompt_text: str,
        response_text: str,
    ) -> Turn:
        """Append the next turn for (user, task) in a single statement.

        Args:
            user_id: Participant id
            task_id: Task id
            prompt_text: Participant prompt
            response_text: Model response (never empty)

        Returns:
            The stored Turn with its assigned turn_number

        Raises:
            PersistenceError: If the insert fails
        """
        created_at = datetime.now(timezone.utc).isoformat()

        try:
            async with self._connect() as db:
                db.row_factory = aiosqlite.Row
                # Take the write lock before reading MAX(turn_number)
                await db.execute("BEGIN IMMEDIATE")
                cursor = await db.execute(
                    """INSERT INTO turns (
                        user_id, task_id, turn_number, prompt_text,
                        response_text, created_at
                    )
                    SELECT ?, ?, COALESCE(MAX(turn_number), 0) + 1, ?, ?, ?
                    FROM turns
                    WHERE user_id = ? AND task_id = ?""",
                    (
                        user_id,
                        task_id,
                        prompt_text,
                        response_text,
                        created_at,
                        user_id,
                        task_id,
                    ),
                )
                turn_id = cursor.lastrowid
                await db.commit()

                cursor = await db.execute("SELECT * FROM turns WHERE id = ?", (turn_id,))
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to store turn: {e}") from e

        if not row:
            raise PersistenceError(f"Turn {turn_id} not found after insert")

        turn = self._row_to_turn(row)
        log.debug(
            "turn_appended",
            user_id=user_id,
            task_id=task_id,
            turn_number=turn.turn_number,
        )
        return turn

    async def list_turns(self, user_id: str, task_id: int) -> List[Turn]:
        """Get all turns for (user, task) ordered by turn_number ascending.

        Raises:
            PersistenceError: If the query fails
        """
        try:
            async with self._connect() as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    """SELECT * FROM turns
                       WHERE user_id = ? AND task_id = ?
                       ORDER BY turn_number ASC""",
                    (user_id, task_id),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to load turns: {e}") from e
        return [self._row_to_turn(row) for row in rows]

    async def completed_task_ids(self, user_id: str) -> List[int]:
        """Distinct task ids with at least one turn for the user, ascending.

        Raises:
            PersistenceError: If the query fails
        """
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    """SELECT DISTINCT task_id FROM turns
                       WHERE user_id = ?
                       ORDER BY task_id ASC""",
                    (user_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to load completed tasks: {e}") from e
        return [row[0] for row in rows]

    def _row_to_turn(self, row: aiosqlite.Row) -> Turn:
        """Convert a database row to a Turn model."""
        return Turn(
            id=row["id"],
            user_id=row["user_id"],
            task_id=row["task_id"],
            turn_number=row["turn_number"],
            prompt_text=row["prompt_text"],
            response_text=row["response_text"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
