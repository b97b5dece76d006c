#!/usr/bin/env python3
"""
Seed the tasks table from the YAML task catalog.

Existing rows are never updated (INSERT OR IGNORE), so the script is safe
to run repeatedly.

Usage:
    python -m scripts.seed_tasks [--catalog config/tasks.yaml] [--database data/study.db]
"""

import argparse
import asyncio
from pathlib import Path

import structlog

from src.core.config import settings
from src.core.task_loader import load_task_catalog
from src.persistence.database import init_database, seed_tasks

log = structlog.get_logger(__name__)


async def seed(catalog: Path, database: Path) -> int:
    tasks = load_task_catalog(catalog)
    await init_database(database)
    inserted = await seed_tasks(tasks, database)
    log.info(
        "tasks_seeded",
        catalog=str(catalog),
        database=str(database),
        task_count=len(tasks),
        inserted=inserted,
        skipped=len(tasks) - inserted,
    )
    return inserted


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed study tasks from YAML")
    parser.add_argument("--catalog", type=Path, default=settings.tasks_file)
    parser.add_argument("--database", type=Path, default=settings.database_path)
    args = parser.parse_args()

    asyncio.run(seed(args.catalog, args.database))


if __name__ == "__main__":
    main()
