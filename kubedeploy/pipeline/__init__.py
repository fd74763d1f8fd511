"""Pipeline module: ordered apply stages and teardown steps."""

from kubedeploy.pipeline.executor import (
    PipelineResult,
    StageResult,
    StageStatus,
    run_apply_stages,
)
from kubedeploy.pipeline.schema import (
    ApplyStage,
    CleanupStep,
    build_apply_stages,
    build_cleanup_steps,
)

__all__ = [
    "ApplyStage",
    "CleanupStep",
    "PipelineResult",
    "StageResult",
    "StageStatus",
    "build_apply_stages",
    "build_cleanup_steps",
    "run_apply_stages",
]
