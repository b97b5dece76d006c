"""Pipeline stage contracts.

Pydantic models for stage outputs to provide type safety and runtime
validation for the turn processing pipeline. Each stage writes exactly one
of these to the PipelineContext.
"""

from datetime import datetime, timezone
from typing import Dict

from pydantic import BaseModel, Field

from src.domain.models.transcript import Transcript
from src.domain.models.turn import Turn


class RequestValidationOutput(BaseModel):
    """Contract: RequestValidationStage output (Stage 1).

    Normalized request values after validation.
    """

    user_id: str = Field(min_length=1)
    task_id: int = Field(ge=1)
    prompt: str = Field(min_length=1, description="Prompt text, non-blank")
    history_length: int = Field(ge=0, description="Number of supplied history messages")


class TurnNumberingOutput(BaseModel):
    """Contract: TurnNumberingStage output (Stage 2).

    The expected turn number is the observed count + 1. The store assigns
    the final number atomically at insert time.
    """

    existing_turn_count: int = Field(ge=0)
    expected_turn_number: int = Field(ge=1)


class TranscriptAssemblyOutput(BaseModel):
    """Contract: TranscriptAssemblyStage output (Stage 3)."""

    transcript: Transcript
    includes_task_context: bool = False
    block_count: int = Field(ge=2, description="System block plus prompt at minimum")


class ModelInvocationOutput(BaseModel):
    """Contract: ModelInvocationStage output (Stage 4)."""

    response_text: str = Field(min_length=1)
    model: str
    placeholder_used: bool = Field(
        default=False, description="Provider returned an empty completion"
    )
    latency_ms: float = 0.0
    usage: Dict[str, int] = Field(default_factory=dict)


class TurnPersistenceOutput(BaseModel):
    """Contract: TurnPersistenceStage output (Stage 5)."""

    turn: Turn
    persisted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
