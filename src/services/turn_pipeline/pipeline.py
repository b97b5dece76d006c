"""
Pipeline orchestrator for turn processing.

TurnPipeline executes stages sequentially with timing and error handling.
Stages never overlap: count read, model call and insert happen strictly one
after another within a submission.
"""

import time
from typing import List

import structlog

from src.core.exceptions import ValidationError

from .base import TurnStage
from .context import PipelineContext
from .result import TurnResult

log = structlog.get_logger(__name__)


class TurnPipeline:
    """
    Orchestrates execution of pipeline stages.

    Executes stages sequentially, tracking timing and handling errors.
    A failing stage aborts the pipeline; nothing is retried.
    """

    def __init__(self, stages: List[TurnStage]):
        """
        Initialize pipeline with a list of stages.

        Args:
            stages: Ordered list of TurnStage instances
        """
        self.stages = stages
        self.logger = log

    async def execute(self, context: PipelineContext) -> TurnResult:
        """
        Execute all stages sequentially.

        Args:
            context: Initial context with the raw submission

        Returns:
            TurnResult with response text and assigned turn number

        Raises:
            ValidationError: If the submission is incomplete (Stage 1)
            StudySystemError: If a store or model call fails
        """
        start_time = time.perf_counter()

        self.logger.info(
            "pipeline_started",
            user_id=context.user_id,
            task_id=context.task_id,
            num_stages=len(self.stages),
        )

        for stage in self.stages:
            stage_start = time.perf_counter()

            try:
                self.logger.debug(
                    "stage_started",
                    stage_name=stage.stage_name,
                    user_id=context.user_id,
                )

                context = await stage.process(context)

                stage_elapsed = (time.perf_counter() - stage_start) * 1000
                context.stage_timings[stage.stage_name] = stage_elapsed

                self.logger.debug(
                    "stage_completed",
                    stage_name=stage.stage_name,
                    duration_ms=stage_elapsed,
                )

            except ValidationError as e:
                self.logger.warning(
                    "stage_rejected",
                    stage_name=stage.stage_name,
                    error=e.message,
                )
                raise
            except Exception as e:
                self.logger.error(
                    "stage_failed",
                    stage_name=stage.stage_name,
                    error=str(e),
                    exc_info=True,
                )
                raise

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        self.logger.info(
            "pipeline_completed",
            user_id=context.user_id,
            task_id=context.task_id,
            turn_number=context.turn_number,
            latency_ms=latency_ms,
            stage_timings=context.stage_timings,
        )

        return self._build_result(context, latency_ms)

    def _build_result(self, context: PipelineContext, latency_ms: int) -> TurnResult:
        """
        Build TurnResult from context.

        Args:
            context: Final pipeline context
            latency_ms: Total pipeline latency

        Returns:
            TurnResult
        """
        invocation = context.model_invocation_output
        return TurnResult(
            response_text=context.response_text,
            turn_number=context.turn_number,
            model=invocation.model if invocation else "",
            placeholder_used=invocation.placeholder_used if invocation else False,
            latency_ms=latency_ms,
            stage_timings=dict(context.stage_timings),
        )
