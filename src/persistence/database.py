"""
SQLite database connection management.

Provides schema initialization, task seeding and health checks.
Uses aiosqlite for async SQLite access.

Schema is defined in schema.sql (consolidated, no migrations).
"""

import aiosqlite
from pathlib import Path
from typing import Iterable
import structlog

from src.core.config import settings
from src.domain.models.task import Task

log = structlog.get_logger(__name__)

# Path to consolidated schema file
SCHEMA_FILE = Path(__file__).parent / "schema.sql"


async def init_database(db_path: Path | None = None) -> None:
    """
    Initialize database from consolidated schema.

    Args:
        db_path: Optional path to database file. Uses settings.database_path if not provided.

    Creates database file if it doesn't exist and applies consolidated schema.
    Existing databases are left intact (idempotent schema using CREATE TABLE IF NOT EXISTS).
    """
    db_path = db_path or settings.database_path

    db_path.parent.mkdir(parents=True, exist_ok=True)

    log.info("initializing_database", path=str(db_path))

    if not SCHEMA_FILE.exists():
        log.error("schema_file_not_found", path=str(SCHEMA_FILE))
        raise FileNotFoundError(f"Schema file not found: {SCHEMA_FILE}")

    async with aiosqlite.connect(db_path) as db:
        # WAL for concurrent reads while a submission writes
        await db.execute("PRAGMA journal_mode = WAL")

        schema_sql = SCHEMA_FILE.read_text()
        await db.executescript(schema_sql)
        await db.commit()

    log.info("database_initialized", path=str(db_path))


async def seed_tasks(tasks: Iterable[Task], db_path: Path | None = None) -> int:
    """
    Pre-seed the tasks table.

    Existing rows are never overwritten (INSERT OR IGNORE), so the catalog
    stays read-only once a study is running.

    Args:
        tasks: Tasks to insert
        db_path: Optional database path (defaults to settings.database_path)

    Returns:
        Number of newly inserted tasks
    """
    db_path = db_path or settings.database_path
    inserted = 0

    async with aiosqlite.connect(db_path) as db:
        for task in tasks:
            cursor = await db.execute(
                "INSERT OR IGNORE INTO tasks (id, name, description) VALUES (?, ?, ?)",
                (task.id, task.name, task.description),
            )
            inserted += cursor.rowcount
        await db.commit()

    log.info("tasks_seeded", path=str(db_path), inserted=inserted)
    return inserted


async def check_database_health() -> dict:
    """
    Check database health for health endpoint.

    Returns:
        Dict with health status and basic metrics.
    """
    try:
        async with aiosqlite.connect(
            settings.database_path, timeout=settings.database_timeout_seconds
        ) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM tasks")
            row = await cursor.fetchone()
            task_count = row[0] if row else 0

            cursor = await db.execute("SELECT COUNT(*) FROM turns")
            row = await cursor.fetchone()
            turn_count = row[0] if row else 0

            cursor = await db.execute("PRAGMA integrity_check")
            integrity = await cursor.fetchone()

            return {
                "status": "healthy",
                "task_count": task_count,
                "turn_count": turn_count,
                "integrity": integrity[0] if integrity else "unknown",
                "path": str(settings.database_path),
            }
    except Exception as e:
        log.error("database_health_check_failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
