"""
Shared test fixtures.

Temporary SQLite databases for repository and API tests, plus in-memory
doubles for the conversation store and the language model.
"""

import pytest
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from unittest.mock import patch

from src.core.exceptions import PersistenceError
from src.domain.models.task import Task
from src.domain.models.turn import Turn
from src.llm.client import LLMClient, LLMResponse
from src.persistence.database import init_database, seed_tasks
from src.persistence.repositories.task_repo import TaskRepository
from src.persistence.repositories.turn_repo import TurnRepository
from src.persistence.repositories.user_repo import UserRepository


SAMPLE_TASKS = [
    Task(id=i, name=f"Task {i}", description=f"Do thing {i}.\\n**Goal:** finish {i}")
    for i in range(1, 8)
]


@pytest.fixture
async def test_db():
    """Create and initialize test database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        from src.core import config

        original_path = config.settings.database_path
        config.settings.database_path = db_path

        with patch("src.persistence.database.settings", config.settings):
            yield db_path

        config.settings.database_path = original_path


@pytest.fixture
async def seeded_db(test_db):
    """Test database with the seven sample tasks."""
    await seed_tasks(SAMPLE_TASKS, test_db)
    return test_db


@pytest.fixture
async def turn_repo(test_db):
    return TurnRepository(str(test_db))


@pytest.fixture
async def task_repo(seeded_db):
    return TaskRepository(str(seeded_db))


@pytest.fixture
async def user_repo(test_db):
    return UserRepository(str(test_db))


# =============================================================================
# Test doubles
# =============================================================================


class InMemoryTurnStore:
    """ITurnStore double that records every call."""

    def __init__(self, fail_append: bool = False):
        self.turns: List[Turn] = []
        self.calls: List[str] = []
        self.fail_append = fail_append

    async def count_turns(self, user_id: str, task_id: int) -> int:
        self.calls.append("count_turns")
        return len([t for t in self.turns if t.user_id == user_id and t.task_id == task_id])

    async def append_turn(
        self, user_id: str, task_id: int, prompt_text: str, response_text: str
    ) -> Turn:
        self.calls.append("append_turn")
        if self.fail_append:
            raise PersistenceError("disk I/O error")
        existing = [t for t in self.turns if t.user_id == user_id and t.task_id == task_id]
        turn = Turn(
            id=len(self.turns) + 1,
            user_id=user_id,
            task_id=task_id,
            turn_number=max((t.turn_number for t in existing), default=0) + 1,
            prompt_text=prompt_text,
            response_text=response_text,
            created_at=datetime.now(timezone.utc),
        )
        self.turns.append(turn)
        return turn

    async def list_turns(self, user_id: str, task_id: int) -> List[Turn]:
        self.calls.append("list_turns")
        return sorted(
            [t for t in self.turns if t.user_id == user_id and t.task_id == task_id],
            key=lambda t: t.turn_number,
        )

    async def completed_task_ids(self, user_id: str) -> List[int]:
        self.calls.append("completed_task_ids")
        return sorted({t.task_id for t in self.turns if t.user_id == user_id})


class FakeLLMClient(LLMClient):
    """LLMClient double returning canned completions and recording transcripts."""

    provider_name = "fake"
    display_name = "Fake"

    def __init__(self, responses: Optional[List[str]] = None, error: Optional[Exception] = None):
        super().__init__(model="fake-model", base_url="http://fake", timeout=1.0)
        self.responses = list(responses or [])
        self.error = error
        self.transcripts = []

    async def generate(self, transcript, timeout=None) -> LLMResponse:
        self.transcripts.append(transcript)
        if self.error is not None:
            raise self.error
        content = self.responses.pop(0) if self.responses else "ok"
        return LLMResponse(content=content, model=self.model, latency_ms=1.0)

    @property
    def call_count(self) -> int:
        return len(self.transcripts)


@pytest.fixture
def turn_store():
    return InMemoryTurnStore()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def make_fake_llm():
    """FakeLLMClient class, for tests that need canned responses or errors."""
    return FakeLLMClient


@pytest.fixture
def make_turn_store():
    return InMemoryTurnStore
