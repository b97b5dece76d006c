"""Tests for task lookup and description rendering."""

import pytest
from unittest.mock import AsyncMock

from src.core.exceptions import TaskNotFoundError
from src.domain.models.task import Task
from src.services.task_service import TaskService, format_task_description


class TestFormatTaskDescription:
    def test_escaped_newlines_become_breaks(self):
        assert format_task_description("first\\nsecond") == "first<br />second"

    def test_real_newlines_become_breaks(self):
        assert format_task_description("first\nsecond") == "first<br />second"

    def test_bold_markers(self):
        assert (
            format_task_description("**Goal:** finish")
            == "<strong>Goal:</strong> finish"
        )

    def test_empty_bold_markers_left_as_text(self):
        assert format_task_description("****") == "****"

    def test_html_is_escaped(self):
        assert (
            format_task_description("<script>x</script> & **b**")
            == "&lt;script&gt;x&lt;/script&gt; &amp; <strong>b</strong>"
        )

    def test_empty(self):
        assert format_task_description("") == ""


class TestTaskService:
    @pytest.mark.asyncio
    async def test_get_task(self):
        catalog = AsyncMock()
        catalog.get.return_value = Task(id=2, name="Second")

        task = await TaskService(catalog).get_task(2)

        assert task.name == "Second"
        catalog.get.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_get_unknown_task_raises(self):
        catalog = AsyncMock()
        catalog.get.return_value = None

        with pytest.raises(TaskNotFoundError, match="Task 42 not found"):
            await TaskService(catalog).get_task(42)

    @pytest.mark.asyncio
    async def test_get_task_from_store(self, task_repo):
        task = await TaskService(task_repo).get_task(1)

        assert task.id == 1
