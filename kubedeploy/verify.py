"""Read-only status listing of the deployed namespace."""

from __future__ import annotations

from kubedeploy._log import get_logger
from kubedeploy.config import RunConfig
from kubedeploy.errors import KubectlError
from kubedeploy.kubectl import ClusterClient

logger = get_logger("verify")

# (kind, heading)
VERIFY_KINDS: list[tuple[str, str]] = [
    ("pods", "Pod status check:"),
    ("svc", "Service status check:"),
    ("ingress", "Ingress status check:"),
    ("hpa", "Autoscaling status check:"),
]


def verify_deployment(config: RunConfig, client: ClusterClient) -> dict[str, str | None]:
    """List pods, services, ingress and autoscalers for human inspection.

    Informational only: a failed listing is logged as a warning and mapped
    to ``None``. Never raises for cluster errors.
    """
    logger.info("Performing post-deployment validation...")
    listings: dict[str, str | None] = {}

    for kind, heading in VERIFY_KINDS:
        logger.info(heading)
        try:
            output = client.get(kind, config.namespace)
        except KubectlError as e:
            logger.warning("Could not list %s in %s: %s", kind, config.namespace, e)
            listings[kind] = None
            continue
        listings[kind] = output
        text = output.rstrip()
        if text:
            for line in text.splitlines():
                logger.info("  %s", line)
        else:
            logger.info("  (no %s found)", kind)

    logger.info("Validation completed.")
    return listings
