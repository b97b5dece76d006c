"""
Stage 3: Assemble the model transcript.

Builds the transcript in fixed order: system instruction, optional task
context, full supplied history, new prompt. Outputs
TranscriptAssemblyOutput contract.
"""

from typing import TYPE_CHECKING

import structlog

from ..base import TurnStage
from src.domain.models.pipeline_contracts import TranscriptAssemblyOutput
from src.domain.models.transcript import Transcript
from src.llm.prompts.study import get_system_block, get_task_context_block

if TYPE_CHECKING:
    from ..context import PipelineContext

log = structlog.get_logger(__name__)


class TranscriptAssemblyStage(TurnStage):
    """
    Assemble the model-facing transcript.

    History is resent in full on every call.
    """

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        """
        Build the transcript from the validated submission.

        Args:
            context: Context with request_validation_output

        Returns:
            Context with transcript_assembly_output set
        """
        if context.request_validation_output is None:
            raise RuntimeError(
                "Pipeline contract violation: TranscriptAssemblyStage (Stage 3) requires "
                "RequestValidationStage (Stage 1) to complete first."
            )

        request = context.request_validation_output
        task_context = get_task_context_block(
            task_id=request.task_id,
            task_name=context.task_name,
            task_description=context.task_description,
        )

        transcript = Transcript.build(
            system=get_system_block(),
            task_context=task_context,
            history=context.conversation_history,
            prompt=request.prompt,
        )

        context.transcript_assembly_output = TranscriptAssemblyOutput(
            transcript=transcript,
            includes_task_context=task_context is not None,
            block_count=len(transcript),
        )

        log.debug(
            "transcript_assembled",
            user_id=request.user_id,
            task_id=request.task_id,
            block_count=len(transcript),
            history_blocks=len(transcript.history),
            includes_task_context=task_context is not None,
        )

        return context
