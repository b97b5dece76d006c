"""
Pipeline stages for turn processing.

Each stage encapsulates one logical step of a prompt submission, from
request validation through turn persistence. Stages execute sequentially
in the TurnPipeline orchestrator.
"""

from .request_validation_stage import RequestValidationStage
from .turn_numbering_stage import TurnNumberingStage
from .transcript_assembly_stage import TranscriptAssemblyStage
from .model_invocation_stage import ModelInvocationStage, EMPTY_RESPONSE_PLACEHOLDER
from .turn_persistence_stage import TurnPersistenceStage

__all__ = [
    "RequestValidationStage",
    "TurnNumberingStage",
    "TranscriptAssemblyStage",
    "ModelInvocationStage",
    "TurnPersistenceStage",
    "EMPTY_RESPONSE_PLACEHOLDER",
]
