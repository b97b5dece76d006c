"""Task sequence progress models.

The study is a fixed sequence of tasks 1..N followed by a terminal
"complete" state. These models describe where a participant may go next;
the transitions themselves live in TaskSequencer.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SequencerStateKind(str, Enum):
    """Kind of sequencer state."""

    TASK = "task"
    COMPLETE = "complete"


class SequencerState(BaseModel):
    """Single state of the task sequence state machine."""

    kind: SequencerStateKind
    task_id: Optional[int] = Field(default=None, ge=1)

    @classmethod
    def task(cls, task_id: int) -> "SequencerState":
        return cls(kind=SequencerStateKind.TASK, task_id=task_id)

    @classmethod
    def complete(cls) -> "SequencerState":
        return cls(kind=SequencerStateKind.COMPLETE)

    @property
    def is_complete(self) -> bool:
        return self.kind == SequencerStateKind.COMPLETE


class TaskAccess(BaseModel):
    """Gating decision for one task.

    Fields:
        - accessible: Whether the participant may open the task
        - required_task_id: Task that must be completed first (None for task 1)
        - next: State reached by moving forward from this task
    """

    task_id: int = Field(ge=1)
    accessible: bool
    required_task_id: Optional[int] = None
    next: SequencerState
    total_tasks: int = Field(ge=1)
