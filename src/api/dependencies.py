"""Dependency injection for API routes."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.core.config import settings
from src.llm.client import LLMClient, get_llm_client
from src.persistence.repositories.task_repo import TaskRepository
from src.persistence.repositories.turn_repo import TurnRepository
from src.persistence.repositories.user_repo import UserRepository
from src.services.completion_tracker import CompletionTracker
from src.services.conversation_service import ConversationService
from src.services.task_sequencer import TaskSequencer
from src.services.task_service import TaskService


def get_turn_repository() -> TurnRepository:
    """FastAPI dependency injection for TurnRepository.

    Each request gets a new repository bound to the configured database path.
    """
    return TurnRepository(str(settings.database_path))


def get_task_repository() -> TaskRepository:
    return TaskRepository(str(settings.database_path))


def get_user_repository() -> UserRepository:
    return UserRepository(str(settings.database_path))


@lru_cache(maxsize=1)
def get_shared_llm_client() -> LLMClient:
    """Cached LLM client for prompt submissions.

    Created once per process on first use. Raises ConfigurationError (not
    cached) while the provider API key is missing.
    """
    return get_llm_client()


TurnRepoDep = Annotated[TurnRepository, Depends(get_turn_repository)]
TaskRepoDep = Annotated[TaskRepository, Depends(get_task_repository)]
UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]


def get_conversation_service(turn_repo: TurnRepoDep) -> ConversationService:
    """FastAPI dependency injection for ConversationService.

    The LLM client is resolved inside the pipeline, after the submission
    has been validated.
    """
    return ConversationService(turn_repo, client_factory=get_shared_llm_client)


def get_task_service(task_repo: TaskRepoDep) -> TaskService:
    return TaskService(task_repo)


def get_completion_tracker(turn_repo: TurnRepoDep) -> CompletionTracker:
    return CompletionTracker(turn_repo)


def get_task_sequencer(
    tracker: Annotated[CompletionTracker, Depends(get_completion_tracker)],
) -> TaskSequencer:
    return TaskSequencer(tracker, total_tasks=settings.total_tasks)


# Type aliases for dependency injection
ConversationServiceDep = Annotated[ConversationService, Depends(get_conversation_service)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
CompletionTrackerDep = Annotated[CompletionTracker, Depends(get_completion_tracker)]
TaskSequencerDep = Annotated[TaskSequencer, Depends(get_task_sequencer)]
