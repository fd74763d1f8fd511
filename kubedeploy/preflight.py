"""Prerequisite checks run before anything touches the cluster."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass, field

from kubedeploy._log import get_logger
from kubedeploy.config import RunConfig
from kubedeploy.errors import KubectlError, PreflightError
from kubedeploy.kubectl import ClusterClient

logger = get_logger("preflight")

_OPTIONAL_TOOL_NOTES = {
    "helm": "helm not detected (optional).",
    "aws": "aws CLI not detected (optional for AWS automation).",
}


@dataclass
class PreflightReport:
    missing_optional: list[str] = field(default_factory=list)


def check_prerequisites(
    config: RunConfig,
    client: ClusterClient,
    which: Callable[[str], str | None] | None = None,
) -> PreflightReport:
    """Verify the client is installed and the cluster answers.

    Raises:
        PreflightError: kubectl is missing or the cluster is unreachable.
    """
    logger.info("Validating system prerequisites...")
    which = which or shutil.which
    report = PreflightReport()

    if not client.is_installed():
        message = f"{config.kubectl} is required but not installed."
        logger.error(message)
        raise PreflightError(message)

    for tool in config.optional_tools:
        if which(tool) is None:
            logger.warning(_OPTIONAL_TOOL_NOTES.get(tool, f"{tool} not detected (optional)."))
            report.missing_optional.append(tool)

    try:
        client.cluster_info()
    except KubectlError as e:
        message = "Kubernetes cluster is not accessible."
        logger.debug("cluster-info failed: %s", e)
        logger.error(message)
        raise PreflightError(message) from e

    logger.info("Prerequisite validation completed successfully.")
    return report
