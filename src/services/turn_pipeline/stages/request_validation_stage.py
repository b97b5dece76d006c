"""
Stage 1: Validate the submission.

Rejects incomplete submissions before any store or model call. Outputs
RequestValidationOutput contract.
"""

from typing import TYPE_CHECKING, List

import structlog

from ..base import TurnStage
from src.core.exceptions import ValidationError
from src.domain.models.pipeline_contracts import RequestValidationOutput

if TYPE_CHECKING:
    from ..context import PipelineContext

log = structlog.get_logger(__name__)


class RequestValidationStage(TurnStage):
    """
    Check that user id, task id and a non-blank prompt are present.

    The prompt is kept exactly as submitted; only the blank check trims it.
    """

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        """
        Validate the raw submission.

        Args:
            context: Context with the raw request fields

        Returns:
            Context with request_validation_output set

        Raises:
            ValidationError: If any required field is missing or blank
        """
        missing: List[str] = []

        if not context.user_id or not str(context.user_id).strip():
            missing.append("userID")
        if (
            context.task_id is None
            or isinstance(context.task_id, bool)
            or not isinstance(context.task_id, int)
            or context.task_id < 1
        ):
            missing.append("taskID")
        if not context.prompt or not context.prompt.strip():
            missing.append("prompt")

        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        context.request_validation_output = RequestValidationOutput(
            user_id=context.user_id,
            task_id=context.task_id,
            prompt=context.prompt,
            history_length=len(context.conversation_history),
        )

        log.debug(
            "request_validated",
            user_id=context.user_id,
            task_id=context.task_id,
            prompt_length=len(context.prompt),
            history_length=len(context.conversation_history),
        )

        return context
