"""Tests for database module."""

import pytest
import tempfile
from pathlib import Path

import aiosqlite

from src.domain.models.task import Task
from src.persistence.database import (
    init_database,
    seed_tasks,
    check_database_health,
)


@pytest.mark.asyncio
async def test_init_database_creates_file():
    """Database initialization creates the database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "nested" / "test.db"

        assert not db_path.exists()

        await init_database(db_path)

        assert db_path.exists()


@pytest.mark.asyncio
async def test_init_database_creates_tables():
    """Database initialization creates all required tables."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        async with aiosqlite.connect(db_path) as db:
            cursor = await db.execute(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            )
            tables = [row[0] for row in await cursor.fetchall()]

        assert "users" in tables
        assert "tasks" in tables
        assert "turns" in tables


@pytest.mark.asyncio
async def test_init_database_is_idempotent():
    """Re-applying the schema keeps existing rows."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)
        await seed_tasks([Task(id=1, name="First")], db_path)

        await init_database(db_path)

        async with aiosqlite.connect(db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM tasks")
            assert (await cursor.fetchone())[0] == 1


@pytest.mark.asyncio
async def test_seed_tasks_never_overwrites():
    """Seeding is INSERT OR IGNORE: existing tasks keep their content."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        inserted = await seed_tasks(
            [Task(id=1, name="Original"), Task(id=2, name="Second")], db_path
        )
        assert inserted == 2

        inserted = await seed_tasks(
            [Task(id=1, name="Changed"), Task(id=3, name="Third")], db_path
        )
        assert inserted == 1

        async with aiosqlite.connect(db_path) as db:
            cursor = await db.execute("SELECT name FROM tasks WHERE id = 1")
            assert (await cursor.fetchone())[0] == "Original"


@pytest.mark.asyncio
async def test_turn_numbers_are_unique_per_user_task():
    """The schema rejects a duplicate (user, task, turn_number)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        async with aiosqlite.connect(db_path) as db:
            insert = (
                "INSERT INTO turns (user_id, task_id, turn_number, prompt_text, "
                "response_text, created_at) VALUES ('u1', 1, 1, 'p', 'r', '2026-01-01')"
            )
            await db.execute(insert)
            with pytest.raises(aiosqlite.IntegrityError):
                await db.execute(insert)


@pytest.mark.asyncio
async def test_check_database_health(test_db):
    """Health check reports counts for an initialized database."""
    health = await check_database_health()

    assert health["status"] == "healthy"
    assert health["task_count"] == 0
    assert health["turn_count"] == 0
    assert health["integrity"] == "ok"


@pytest.mark.asyncio
async def test_check_database_health_unhealthy(tmp_path):
    """Health check reports unhealthy when the schema is missing."""
    from src.core import config

    original_path = config.settings.database_path
    config.settings.database_path = tmp_path / "empty.db"
    try:
        health = await check_database_health()
    finally:
        config.settings.database_path = original_path

    assert health["status"] == "unhealthy"
    assert "error" in health
