"""Sequential apply engine with fail-fast semantics."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum

from kubedeploy._log import get_logger
from kubedeploy.errors import KubectlError
from kubedeploy.kubectl import ClusterClient
from kubedeploy.pipeline.schema import ApplyStage

logger = get_logger("apply")


class StageStatus(StrEnum):
    SUCCESS = "success"
    HARD_FAILURE = "hard-failure"
    SOFT_FAILURE = "soft-failure"
    SKIPPED = "skipped"


@dataclass
class StageResult:
    name: str
    status: StageStatus = StageStatus.SUCCESS
    output: str = ""
    changed: bool = False
    error: str | None = None
    duration_ms: int = 0
    skip_reason: str | None = None

    @property
    def success(self) -> bool:
        return self.status in (StageStatus.SUCCESS, StageStatus.SOFT_FAILURE)


@dataclass
class PipelineResult:
    stage_results: list[StageResult] = field(default_factory=list)
    duration_ms: int = 0
    success: bool = True
    failed_stage: str | None = None
    error: str | None = None

    @property
    def executed(self) -> list[str]:
        return [sr.name for sr in self.stage_results if sr.status != StageStatus.SKIPPED]


def _apply_stage(stage: ApplyStage, client: ClusterClient) -> StageResult:
    start = time.monotonic()
    result = StageResult(name=stage.name)
    logger.info(stage.description)
    try:
        outcome = client.apply(stage.manifest)
    except KubectlError as e:
        result.status = StageStatus.HARD_FAILURE
        result.error = stage.failure_message
        logger.debug("Stage '%s' failed: %s", stage.name, e)
        if e.stderr:
            result.output = e.stderr
    else:
        result.output = outcome.output
        result.changed = outcome.changed
        if not outcome.changed:
            logger.debug("Stage '%s' already converged", stage.name)
    result.duration_ms = int((time.monotonic() - start) * 1000)
    return result


def run_apply_stages(stages: list[ApplyStage], client: ClusterClient) -> PipelineResult:
    """Apply *stages* in order, stopping at the first hard failure.

    Stages after the failure are recorded as skipped and never invoked.
    """
    pipeline_result = PipelineResult()
    start = time.monotonic()

    for stage in stages:
        if not pipeline_result.success:
            pipeline_result.stage_results.append(
                StageResult(
                    name=stage.name,
                    status=StageStatus.SKIPPED,
                    skip_reason=f"Skipped after '{pipeline_result.failed_stage}' failed",
                )
            )
            continue

        sr = _apply_stage(stage, client)
        pipeline_result.stage_results.append(sr)
        if sr.status == StageStatus.HARD_FAILURE:
            pipeline_result.success = False
            pipeline_result.failed_stage = stage.name
            pipeline_result.error = sr.error
            logger.error(sr.error)

    pipeline_result.duration_ms = int((time.monotonic() - start) * 1000)
    return pipeline_result
