"""
Task sequencer: gating through the fixed task sequence.

States are task[1..N] plus a terminal "complete" state. task[1] is always
reachable; task[i+1] opens once task[i] has at least one turn. Completed
tasks may always be revisited.
"""

from typing import Optional, Set

import structlog

from src.core.config import settings
from src.core.exceptions import TaskLockedError, TaskNotFoundError
from src.domain.models.progress import SequencerState, TaskAccess
from src.services.completion_tracker import CompletionTracker

log = structlog.get_logger(__name__)


class TaskSequencer:
    """Gate access to tasks based on the completion set."""

    def __init__(self, tracker: CompletionTracker, total_tasks: Optional[int] = None):
        """
        Initialize sequencer.

        Args:
            tracker: Completion tracker for the participant's turn log
            total_tasks: Length of the sequence (defaults to settings.total_tasks)
        """
        self.tracker = tracker
        self.total_tasks = total_tasks if total_tasks is not None else settings.total_tasks

    def _check_range(self, task_id: int) -> None:
        if task_id < 1 or task_id > self.total_tasks:
            raise TaskNotFoundError(f"Task {task_id} not found")

    @staticmethod
    def is_accessible(task_id: int, completed: Set[int]) -> bool:
        """Task 1 is always open; any other task needs its predecessor done."""
        return task_id == 1 or (task_id - 1) in completed

    def next_state(self, task_id: int) -> SequencerState:
        """State reached by moving forward from task_id."""
        self._check_range(task_id)
        if task_id < self.total_tasks:
            return SequencerState.task(task_id + 1)
        return SequencerState.complete()

    async def can_access(self, user_id: str, task_id: int) -> bool:
        self._check_range(task_id)
        completed = await self.tracker.completed_task_ids(user_id)
        return self.is_accessible(task_id, completed)

    async def access(self, user_id: str, task_id: int) -> TaskAccess:
        """
        Gating decision for one task.

        Args:
            user_id: Participant id
            task_id: Task the participant wants to open

        Returns:
            TaskAccess with the decision and the forward state

        Raises:
            TaskNotFoundError: If task_id is outside 1..N
        """
        self._check_range(task_id)
        completed = await self.tracker.completed_task_ids(user_id)
        accessible = self.is_accessible(task_id, completed)

        log.debug(
            "task_access_checked",
            user_id=user_id,
            task_id=task_id,
            accessible=accessible,
        )

        return TaskAccess(
            task_id=task_id,
            accessible=accessible,
            required_task_id=None if task_id == 1 else task_id - 1,
            next=self.next_state(task_id),
            total_tasks=self.total_tasks,
        )

    async def advance(self, user_id: str, task_id: int) -> SequencerState:
        """
        Move forward from task_id.

        Raises:
            TaskNotFoundError: If task_id is outside 1..N
            TaskLockedError: If task_id has no turns yet
        """
        self._check_range(task_id)
        completed = await self.tracker.completed_task_ids(user_id)
        if task_id not in completed:
            raise TaskLockedError(
                f"Task {task_id} must have at least one turn before moving on"
            )

        state = self.next_state(task_id)
        log.info(
            "task_advanced",
            user_id=user_id,
            from_task_id=task_id,
            to_state=state.kind.value,
            to_task_id=state.task_id,
        )
        return state

    async def resume_state(self, user_id: str) -> SequencerState:
        """First task without turns, or complete when every task has one."""
        completed = await self.tracker.completed_task_ids(user_id)
        for task_id in range(1, self.total_tasks + 1):
            if task_id not in completed:
                return SequencerState.task(task_id)
        return SequencerState.complete()
