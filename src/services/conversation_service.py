"""
Conversation service: prompt submission and conversation replay.

Main entry point for turn processing. Wires the TurnPipeline with its five
stages and exposes the read side of the conversation store.
"""

from typing import Callable, List, Optional, Sequence

import structlog

from src.domain.models.turn import Message, Turn, conversation_from_turns
from src.llm.client import LLMClient, get_llm_client
from src.services.protocols import ITurnStore
from src.services.turn_pipeline import PipelineContext, TurnPipeline, TurnResult
from src.services.turn_pipeline.stages import (
    ModelInvocationStage,
    RequestValidationStage,
    TranscriptAssemblyStage,
    TurnNumberingStage,
    TurnPersistenceStage,
)

log = structlog.get_logger(__name__)


def build_turn_pipeline(
    turn_store: ITurnStore,
    client_factory: Callable[[], LLMClient] = get_llm_client,
) -> TurnPipeline:
    """
    Build the turn processing pipeline.

    Stages execute in order:
    1. RequestValidationStage - reject incomplete submissions
    2. TurnNumberingStage - observe the expected turn number
    3. TranscriptAssemblyStage - system, task context, history, prompt
    4. ModelInvocationStage - single model call, placeholder on empty
    5. TurnPersistenceStage - atomic append of prompt and response

    Args:
        turn_store: Conversation store
        client_factory: Returns the LLM client, called once per submission

    Returns:
        Configured TurnPipeline
    """
    return TurnPipeline(
        stages=[
            RequestValidationStage(),
            TurnNumberingStage(turn_store),
            TranscriptAssemblyStage(),
            ModelInvocationStage(client_factory),
            TurnPersistenceStage(turn_store),
        ]
    )


class ConversationService:
    """Submit prompts and replay stored conversations."""

    def __init__(
        self,
        turn_store: ITurnStore,
        client_factory: Callable[[], LLMClient] = get_llm_client,
    ):
        """
        Initialize conversation service with pipeline.

        Args:
            turn_store: Conversation store
            client_factory: LLM client factory (defaults to the configured provider)
        """
        self.turn_store = turn_store
        self.pipeline = build_turn_pipeline(turn_store, client_factory)

    async def submit_prompt(
        self,
        user_id: Optional[str],
        task_id: Optional[int],
        prompt: Optional[str],
        conversation_history: Optional[Sequence[Message]] = None,
        task_name: Optional[str] = None,
        task_description: Optional[str] = None,
    ) -> TurnResult:
        """
        Process one prompt submission.

        Args:
            user_id: Participant id
            task_id: Task id
            prompt: New prompt text
            conversation_history: Prior messages, sent to the model in full
            task_name: Optional task name for the task context block
            task_description: Optional task description for the task context block

        Returns:
            TurnResult with response text and assigned turn number

        Raises:
            ValidationError: If a required field is missing or blank
            ConfigurationError: If the model provider is not configured
            LLMError: If the model call fails
            PersistenceError: If the store fails
        """
        context = PipelineContext(
            user_id=user_id,
            task_id=task_id,
            prompt=prompt,
            conversation_history=list(conversation_history or []),
            task_name=task_name,
            task_description=task_description,
        )

        result = await self.pipeline.execute(context)

        log.info(
            "prompt_processed",
            user_id=user_id,
            task_id=task_id,
            turn_number=result.turn_number,
            placeholder_used=result.placeholder_used,
            latency_ms=result.latency_ms,
        )

        return result

    async def list_turns(self, user_id: str, task_id: int) -> List[Turn]:
        """Stored turns for (user, task), ordered by turn_number."""
        return await self.turn_store.list_turns(user_id, task_id)

    async def get_conversation(self, user_id: str, task_id: int) -> List[Message]:
        """Conversation rebuilt from stored turns (user, assistant per turn)."""
        turns = await self.list_turns(user_id, task_id)
        return conversation_from_turns(turns)
