"""
Stage 5: Persist the turn.

Appends prompt and response together as one Turn. If the insert fails the
pipeline fails and the response is never returned. Outputs
TurnPersistenceOutput contract.
"""

from typing import TYPE_CHECKING

import structlog

from ..base import TurnStage
from src.core.exceptions import PersistenceError
from src.domain.models.pipeline_contracts import TurnPersistenceOutput
from src.services.protocols import ITurnStore

if TYPE_CHECKING:
    from ..context import PipelineContext

log = structlog.get_logger(__name__)


class TurnPersistenceStage(TurnStage):
    """
    Append the turn to the conversation store.

    Not retried: a failed insert discards the model response.
    """

    def __init__(self, turn_store: ITurnStore):
        """
        Initialize stage.

        Args:
            turn_store: Conversation store
        """
        self.turn_store = turn_store

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        """
        Store prompt and response as the next turn.

        Args:
            context: Context with validation, numbering and model outputs

        Returns:
            Context with turn_persistence_output set

        Raises:
            PersistenceError: If the insert fails
        """
        if context.model_invocation_output is None:
            raise RuntimeError(
                "Pipeline contract violation: TurnPersistenceStage (Stage 5) requires "
                "ModelInvocationStage (Stage 4) to complete first."
            )
        if context.turn_numbering_output is None:
            raise RuntimeError(
                "Pipeline contract violation: TurnPersistenceStage (Stage 5) requires "
                "TurnNumberingStage (Stage 2) to complete first."
            )

        request = context.request_validation_output
        try:
            turn = await self.turn_store.append_turn(
                user_id=request.user_id,
                task_id=request.task_id,
                prompt_text=request.prompt,
                response_text=context.response_text,
            )
        except PersistenceError as e:
            log.error(
                "turn_persist_failed",
                user_id=request.user_id,
                task_id=request.task_id,
                expected_turn_number=context.expected_turn_number,
                response_length=len(context.response_text),
                error=e.message,
            )
            raise PersistenceError("Failed to store prompt") from e

        if turn.turn_number != context.expected_turn_number:
            # A concurrent submission for the same (user, task) landed first
            log.warning(
                "turn_number_shifted",
                user_id=request.user_id,
                task_id=request.task_id,
                expected_turn_number=context.expected_turn_number,
                assigned_turn_number=turn.turn_number,
            )

        context.turn_persistence_output = TurnPersistenceOutput(turn=turn)

        log.info(
            "turn_persisted",
            user_id=request.user_id,
            task_id=request.task_id,
            turn_number=turn.turn_number,
        )

        return context
