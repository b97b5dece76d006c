#!/usr/bin/env python3
"""
Rebuild the database from scratch.

This script:
1. Deletes the existing database file
2. Re-initializes the schema using init_database()
3. Re-seeds the task catalog

Run with: python -m scripts.rebuild_database

WARNING: This will DELETE ALL PARTICIPANTS AND TURNS.
Use only for development/testing purposes.
"""

import asyncio

import structlog

from src.core.config import settings
from src.core.task_loader import load_task_catalog
from src.persistence.database import init_database, seed_tasks

log = structlog.get_logger(__name__)


async def rebuild_database() -> None:
    """Delete the existing database, recreate it and seed the tasks."""
    db_path = settings.database_path

    if not db_path.exists():
        log.info(
            "database_not_found",
            path=str(db_path),
            message="No existing database to delete",
        )
    else:
        file_size = db_path.stat().st_size
        log.warning(
            "deleting_database",
            path=str(db_path),
            size_bytes=file_size,
            size_mb=f"{file_size / (1024 * 1024):.2f}",
        )
        db_path.unlink()
        log.info("database_deleted", path=str(db_path))

    log.info("reinitializing_database", path=str(db_path))
    await init_database()

    tasks = load_task_catalog()
    inserted = await seed_tasks(tasks)

    if db_path.exists():
        log.info(
            "database_rebuilt",
            path=str(db_path),
            tasks_seeded=inserted,
            size_kb=f"{db_path.stat().st_size / 1024:.2f}",
        )
    else:
        log.error("database_rebuild_failed", path=str(db_path))


if __name__ == "__main__":
    log.info("starting_database_rebuild")
    asyncio.run(rebuild_database())
    log.info("database_rebuild_complete")
