"""
Completion tracking for the task sequence.

A task counts as completed once the participant has at least one stored
turn for it. The set is recomputed from the turn log on every call.
"""

from typing import Set

import structlog

from src.services.protocols import ITurnStore

log = structlog.get_logger(__name__)


class CompletionTracker:
    """Derive a participant's completion set from the conversation store."""

    def __init__(self, turn_store: ITurnStore):
        self.turn_store = turn_store

    async def completed_task_ids(self, user_id: str) -> Set[int]:
        """
        Task ids with at least one turn for this participant.

        Args:
            user_id: Participant id

        Returns:
            Set of completed task ids (empty for a new participant)
        """
        completed = set(await self.turn_store.completed_task_ids(user_id))
        log.debug("completion_set_loaded", user_id=user_id, completed=sorted(completed))
        return completed

    async def is_completed(self, user_id: str, task_id: int) -> bool:
        return task_id in await self.completed_task_ids(user_id)
