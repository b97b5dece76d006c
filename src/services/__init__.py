# noqa
from src.services.completion_tracker import CompletionTracker
from src.services.conversation_service import ConversationService, build_turn_pipeline
from src.services.task_sequencer import TaskSequencer
from src.services.task_service import TaskService, format_task_description

__all__ = [
    "CompletionTracker",
    "ConversationService",
    "build_turn_pipeline",
    "TaskSequencer",
    "TaskService",
    "format_task_description",
]
