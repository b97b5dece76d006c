"""
Service protocol definitions (interfaces).

Defines formal interfaces for the external collaborators of the turn
pipeline using Python's typing.Protocol. Repositories satisfy them
structurally, and tests substitute in-memory doubles.
"""

from typing import List, Optional, Protocol

from src.domain.models.task import Task
from src.domain.models.turn import Turn


class ITurnStore(Protocol):
    """
    Protocol for the conversation store.

    Append-only log of turns per (user, task).
    """

    async def count_turns(self, user_id: str, task_id: int) -> int:
        """Number of stored turns for (user, task)."""
        ...

    async def append_turn(
        self,
        user_id: str,
        task_id: int,
        prompt_text: str,
        response_text: str,
    ) -> Turn:
        """
        Atomically append the next turn for (user, task).

        Returns:
            Stored Turn with the store-assigned turn_number
        """
        ...

    async def list_turns(self, user_id: str, task_id: int) -> List[Turn]:
        """Turns for (user, task) ordered by turn_number ascending."""
        ...

    async def completed_task_ids(self, user_id: str) -> List[int]:
        """Distinct task ids with at least one turn, ascending."""
        ...


class ITaskCatalog(Protocol):
    """Protocol for read-only task lookup."""

    async def get(self, task_id: int) -> Optional[Task]:
        """Task by id, None if unknown."""
        ...
