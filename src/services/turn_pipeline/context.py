"""
Turn processing pipeline context for contract-based state accumulation.

Carries the submission inputs and accumulates one contract output per
stage. Contracts are the single source of truth for turn data; the
convenience properties below only derive from them.

Key responsibilities:
- Hold the raw submission (validated by Stage 1, never mutated)
- Accumulate contract outputs from each pipeline stage
- Enforce pipeline ordering through RuntimeError on premature access
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.domain.models.pipeline_contracts import (
    ModelInvocationOutput,
    RequestValidationOutput,
    TranscriptAssemblyOutput,
    TurnNumberingOutput,
    TurnPersistenceOutput,
)
from src.domain.models.transcript import Transcript
from src.domain.models.turn import Message


@dataclass
class PipelineContext:
    """Pipeline context for one prompt submission.

    Stage outputs (contracts):
    - Stage 1: RequestValidationOutput - normalized user/task/prompt
    - Stage 2: TurnNumberingOutput - observed turn count, expected number
    - Stage 3: TranscriptAssemblyOutput - model-facing transcript
    - Stage 4: ModelInvocationOutput - model response text
    - Stage 5: TurnPersistenceOutput - stored Turn with assigned number
    """

    # =============================================================================
    # Input parameters (as received, immutable after creation)
    # =============================================================================
    user_id: Optional[str]
    task_id: Optional[int]
    prompt: Optional[str]
    conversation_history: List[Message] = field(default_factory=list)
    task_name: Optional[str] = None
    task_description: Optional[str] = None

    # =============================================================================
    # Stage Outputs (Contracts)
    # =============================================================================
    request_validation_output: Optional[RequestValidationOutput] = None
    turn_numbering_output: Optional[TurnNumberingOutput] = None
    transcript_assembly_output: Optional[TranscriptAssemblyOutput] = None
    model_invocation_output: Optional[ModelInvocationOutput] = None
    turn_persistence_output: Optional[TurnPersistenceOutput] = None

    # Per-stage durations in ms, filled by TurnPipeline
    stage_timings: Dict[str, float] = field(default_factory=dict)

    # =============================================================================
    # Convenience Properties (derive from contracts, don't duplicate state)
    # =============================================================================

    @property
    def expected_turn_number(self) -> int:
        """Turn number observed before the model call.

        Raises:
            RuntimeError: If TurnNumberingStage (Stage 2) has not completed
        """
        if self.turn_numbering_output:
            return self.turn_numbering_output.expected_turn_number
        raise RuntimeError(
            "Pipeline contract violation: expected_turn_number accessed before "
            "TurnNumberingStage (Stage 2) completed. "
            f"User: {self.user_id}, task: {self.task_id}"
        )

    @property
    def transcript(self) -> Transcript:
        """Assembled transcript.

        Raises:
            RuntimeError: If TranscriptAssemblyStage (Stage 3) has not completed
        """
        if self.transcript_assembly_output:
            return self.transcript_assembly_output.transcript
        raise RuntimeError(
            "Pipeline contract violation: transcript accessed before "
            "TranscriptAssemblyStage (Stage 3) completed. "
            f"User: {self.user_id}, task: {self.task_id}"
        )

    @property
    def response_text(self) -> str:
        """Model response text (placeholder already applied).

        Raises:
            RuntimeError: If ModelInvocationStage (Stage 4) has not completed
        """
        if self.model_invocation_output:
            return self.model_invocation_output.response_text
        raise RuntimeError(
            "Pipeline contract violation: response_text accessed before "
            "ModelInvocationStage (Stage 4) completed. "
            f"User: {self.user_id}, task: {self.task_id}"
        )

    @property
    def turn_number(self) -> int:
        """Turn number assigned by the store.

        Raises:
            RuntimeError: If TurnPersistenceStage (Stage 5) has not completed
        """
        if self.turn_persistence_output:
            return self.turn_persistence_output.turn.turn_number
        raise RuntimeError(
            "Pipeline contract violation: turn_number accessed before "
            "TurnPersistenceStage (Stage 5) completed. "
            f"User: {self.user_id}, task: {self.task_id}"
        )
