"""Deployment run: preflight, apply stages, settle, verify, health check."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from kubedeploy._log import get_logger
from kubedeploy.config import RunConfig
from kubedeploy.errors import PreflightError
from kubedeploy.health import HealthReport, probe_health
from kubedeploy.kubectl import ClusterClient
from kubedeploy.pipeline.executor import PipelineResult, run_apply_stages
from kubedeploy.pipeline.schema import ApplyStage, build_apply_stages
from kubedeploy.preflight import PreflightReport, check_prerequisites
from kubedeploy.verify import verify_deployment

logger = get_logger("deploy")

_BANNER = "=" * 58


class RunState(StrEnum):
    START = "start"
    PREFLIGHT = "preflight"
    APPLY = "apply"
    SETTLE = "settle"
    VERIFY = "verify"
    HEALTH_CHECK = "health-check"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class DeploymentResult:
    run_id: str
    namespace: str
    state: RunState = RunState.START
    states: list[RunState] = field(default_factory=lambda: [RunState.START])
    preflight: PreflightReport | None = None
    pipeline: PipelineResult | None = None
    health: HealthReport | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.state == RunState.DONE

    def advance(self, state: RunState) -> None:
        self.state = state
        self.states.append(state)


def _log_summary(config: RunConfig) -> None:
    logger.info(_BANNER)
    logger.info("Deployment completed successfully.")
    logger.info("Deployment log file: %s", config.log_file)
    logger.info("Namespace: %s", config.namespace)
    logger.info("To monitor resources: kubectl get all -n %s", config.namespace)
    logger.info(_BANNER)


def run_deployment(
    config: RunConfig,
    client: ClusterClient,
    *,
    stages: list[ApplyStage] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    probe: Callable[[RunConfig, ClusterClient], HealthReport] = probe_health,
) -> DeploymentResult:
    """Run the full pipeline once.

    A hard failure in preflight or any apply stage moves the run to
    ``ABORTED`` and nothing after it executes. Verification and the health
    probe only log; they cannot abort a run.
    """
    result = DeploymentResult(run_id=config.run_id, namespace=config.namespace)
    logger.info("Starting automated deployment pipeline (run %s)...", config.run_id)

    result.advance(RunState.PREFLIGHT)
    try:
        result.preflight = check_prerequisites(config, client)
    except PreflightError as e:
        result.error = str(e)
        result.advance(RunState.ABORTED)
        return result

    result.advance(RunState.APPLY)
    result.pipeline = run_apply_stages(
        stages if stages is not None else build_apply_stages(config), client
    )
    if not result.pipeline.success:
        result.error = result.pipeline.error
        result.advance(RunState.ABORTED)
        return result

    result.advance(RunState.SETTLE)
    logger.info("Waiting %ss for resources to initialize...", f"{config.settle_seconds:g}")
    sleep(config.settle_seconds)

    result.advance(RunState.VERIFY)
    verify_deployment(config, client)

    result.advance(RunState.HEALTH_CHECK)
    result.health = probe(config, client)

    result.advance(RunState.DONE)
    _log_summary(config)
    return result
