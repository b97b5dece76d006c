"""
Stage 2: Observe the current turn count.

Reads the number of stored turns for (user, task). The expected turn number
is count + 1; the store assigns the final number atomically in Stage 5.
Outputs TurnNumberingOutput contract.
"""

from typing import TYPE_CHECKING

import structlog

from ..base import TurnStage
from src.domain.models.pipeline_contracts import TurnNumberingOutput
from src.services.protocols import ITurnStore

if TYPE_CHECKING:
    from ..context import PipelineContext

log = structlog.get_logger(__name__)


class TurnNumberingStage(TurnStage):
    """Count existing turns to derive the expected turn number."""

    def __init__(self, turn_store: ITurnStore):
        """
        Initialize stage.

        Args:
            turn_store: Conversation store
        """
        self.turn_store = turn_store

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        """
        Read the turn count for (user, task).

        Args:
            context: Context with request_validation_output

        Returns:
            Context with turn_numbering_output set
        """
        if context.request_validation_output is None:
            raise RuntimeError(
                "Pipeline contract violation: TurnNumberingStage (Stage 2) requires "
                "RequestValidationStage (Stage 1) to complete first."
            )

        request = context.request_validation_output
        count = await self.turn_store.count_turns(request.user_id, request.task_id)

        context.turn_numbering_output = TurnNumberingOutput(
            existing_turn_count=count,
            expected_turn_number=count + 1,
        )

        log.debug(
            "turn_number_observed",
            user_id=request.user_id,
            task_id=request.task_id,
            expected_turn_number=count + 1,
        )

        return context
