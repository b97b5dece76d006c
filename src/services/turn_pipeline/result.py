"""
Result object for turn processing pipeline.

Returned by the pipeline after all stages complete. Only ever built on full
success: a turn whose persistence failed never produces a result.
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class TurnResult:
    """Result of processing a single prompt submission."""

    response_text: str
    turn_number: int
    model: str = ""
    placeholder_used: bool = False  # provider returned an empty completion
    latency_ms: int = 0
    stage_timings: Dict[str, float] = field(default_factory=dict)
