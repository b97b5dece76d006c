"""Domain models package."""

from .task import Task
from .user import User
from .turn import Turn, Message, Role, conversation_from_turns
from .transcript import (
    Transcript,
    TranscriptRole,
    SystemBlock,
    TaskContextBlock,
    HistoryBlock,
    PromptBlock,
)
from .progress import SequencerState, SequencerStateKind, TaskAccess

__all__ = [
    "Task",
    "User",
    "Turn",
    "Message",
    "Role",
    "conversation_from_turns",
    "Transcript",
    "TranscriptRole",
    "SystemBlock",
    "TaskContextBlock",
    "HistoryBlock",
    "PromptBlock",
    "SequencerState",
    "SequencerStateKind",
    "TaskAccess",
]
