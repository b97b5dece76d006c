"""
Task catalog access and description rendering.

Task descriptions are authored with literal "\\n" escape sequences and
**bold** markers. format_task_description() turns them into display HTML.
"""

import html
import re

import structlog

from src.core.exceptions import TaskNotFoundError
from src.domain.models.task import Task
from src.services.protocols import ITaskCatalog

log = structlog.get_logger(__name__)

_BOLD = re.compile(r"\*\*(.+?)\*\*")


def format_task_description(description: str) -> str:
    """
    Render a task description as HTML.

    Literal backslash-n sequences become line breaks, text is HTML-escaped,
    and **x** becomes <strong>x</strong>.

    Args:
        description: Raw description as stored in the catalog

    Returns:
        HTML fragment (empty string for an empty description)
    """
    if not description:
        return ""
    text = description.replace("\\n", "\n")
    text = html.escape(text)
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    return text.replace("\n", "<br />")


class TaskService:
    """Lookup of study tasks."""

    def __init__(self, catalog: ITaskCatalog):
        self.catalog = catalog

    async def get_task(self, task_id: int) -> Task:
        """
        Get a task by id.

        Raises:
            TaskNotFoundError: If the task is not in the catalog
        """
        task = await self.catalog.get(task_id)
        if task is None:
            log.warning("task_not_found", task_id=task_id)
            raise TaskNotFoundError(f"Task {task_id} not found")
        return task
