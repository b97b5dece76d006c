"""
Stage 4: Invoke the language model.

One call per submission, no retries. Empty completions are replaced with
a fixed placeholder. Outputs ModelInvocationOutput contract.
"""

from typing import TYPE_CHECKING, Callable

import structlog

from ..base import TurnStage
from src.domain.models.pipeline_contracts import ModelInvocationOutput
from src.llm.client import LLMClient

if TYPE_CHECKING:
    from ..context import PipelineContext

log = structlog.get_logger(__name__)

EMPTY_RESPONSE_PLACEHOLDER = "No response generated"


class ModelInvocationStage(TurnStage):
    """
    Send the transcript to the language model.

    The client is resolved lazily so that a missing API key surfaces as a
    ConfigurationError only after the request passed validation.
    """

    def __init__(self, client_factory: Callable[[], LLMClient]):
        """
        Initialize stage.

        Args:
            client_factory: Returns the configured LLMClient
        """
        self.client_factory = client_factory

    async def process(self, context: "PipelineContext") -> "PipelineContext":
        """
        Call the model with the assembled transcript.

        Args:
            context: Context with transcript_assembly_output

        Returns:
            Context with model_invocation_output set

        Raises:
            ConfigurationError: If the provider is not configured
            LLMError: If the call fails or the payload is malformed
        """
        if context.transcript_assembly_output is None:
            raise RuntimeError(
                "Pipeline contract violation: ModelInvocationStage (Stage 4) requires "
                "TranscriptAssemblyStage (Stage 3) to complete first."
            )

        client = self.client_factory()
        response = await client.generate(context.transcript)

        placeholder_used = not response.content
        if placeholder_used:
            log.warning(
                "empty_completion_replaced",
                user_id=context.user_id,
                task_id=context.task_id,
                model=response.model,
            )

        context.model_invocation_output = ModelInvocationOutput(
            response_text=response.content or EMPTY_RESPONSE_PLACEHOLDER,
            model=response.model,
            placeholder_used=placeholder_used,
            latency_ms=response.latency_ms,
            usage=response.usage,
        )

        return context
