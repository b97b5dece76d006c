"""
Turn processing pipeline.

This package implements a composable pipeline pattern for processing prompt
submissions: validate, number, assemble transcript, call the model, persist.
"""

from .base import TurnStage
from .context import PipelineContext
from .pipeline import TurnPipeline
from .result import TurnResult

__all__ = [
    "TurnStage",
    "PipelineContext",
    "TurnPipeline",
    "TurnResult",
]
