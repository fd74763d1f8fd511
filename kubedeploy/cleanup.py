"""Best-effort reverse-order teardown."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from kubedeploy._log import get_logger
from kubedeploy.config import RunConfig
from kubedeploy.errors import KubectlError
from kubedeploy.kubectl import ClusterClient
from kubedeploy.pipeline.executor import StageResult, StageStatus
from kubedeploy.pipeline.schema import CleanupStep, build_cleanup_steps

logger = get_logger("cleanup")


@dataclass
class CleanupReport:
    step_results: list[StageResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        # Teardown is best effort: individual failures never fail the command.
        return True

    @property
    def failed(self) -> list[str]:
        return [sr.name for sr in self.step_results if sr.status != StageStatus.SUCCESS]


def _delete(step: CleanupStep, client: ClusterClient) -> StageResult:
    start = time.monotonic()
    result = StageResult(name=step.name)
    try:
        if step.namespace is not None:
            result.output = client.delete_namespace(step.namespace)
        elif step.manifest is not None:
            result.output = client.delete(step.manifest)
        result.changed = True
    except KubectlError as e:
        result.status = StageStatus.SOFT_FAILURE
        result.error = str(e)
    result.duration_ms = int((time.monotonic() - start) * 1000)
    return result


def run_cleanup(
    config: RunConfig,
    client: ClusterClient,
    steps: list[CleanupStep] | None = None,
) -> CleanupReport:
    """Attempt every deletion exactly once, in order, and collect the outcomes."""
    logger.info("Initiating cleanup process for namespace %s...", config.namespace)
    report = CleanupReport()

    for step in steps if steps is not None else build_cleanup_steps(config):
        sr = _delete(step, client)
        report.step_results.append(sr)
        if sr.status == StageStatus.SUCCESS:
            logger.info("Deleted %s", step.target)
        else:
            logger.warning("Could not delete %s: %s", step.target, sr.error)

    if report.failed:
        logger.warning(
            "Cleanup finished with %d failed step(s): %s",
            len(report.failed),
            ", ".join(report.failed),
        )
    logger.info("Cleanup process completed.")
    return report
