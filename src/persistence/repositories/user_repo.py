"""User repository for participant registration."""

from datetime import datetime
from typing import Optional

import aiosqlite
import structlog

from src.core.config import settings
from src.core.exceptions import DuplicateUserError, PersistenceError
from src.domain.models.user import User

log = structlog.get_logger(__name__)


class UserRepository:
    """Repository for participant records. Insert-only."""

    def __init__(self, db_path: str, timeout: Optional[float] = None):
        self.db_path = db_path
        self.timeout = timeout or settings.database_timeout_seconds

    async def create(self, user_id: str) -> User:
        """Register a participant id.

        Raises:
            DuplicateUserError: If the id is already registered
            PersistenceError: If the insert fails for any other reason
        """
        try:
            async with aiosqlite.connect(self.db_path, timeout=self.timeout) as db:
                db.row_factory = aiosqlite.Row
                await db.execute("INSERT INTO users (id) VALUES (?)", (user_id,))
                await db.commit()

                cursor = await db.execute("SELECT * FROM users WHERE id = ?", (user_id,))
                row = await cursor.fetchone()
        except aiosqlite.IntegrityError as e:
            raise DuplicateUserError(f"User {user_id} already exists") from e
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to create user: {e}") from e

        log.info("user_registered", user_id=user_id)
        return User(id=row["id"], created_at=datetime.fromisoformat(row["created_at"]))
