"""Best-effort external reachability probe."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import httpx

from kubedeploy._log import get_logger
from kubedeploy.config import RunConfig
from kubedeploy.errors import KubectlError
from kubedeploy.kubectl import PENDING_ADDRESS, ClusterClient, ServiceInfo

logger = get_logger("health")


class HealthStatus(StrEnum):
    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"
    PENDING = "pending"
    NO_EXTERNAL_SERVICE = "no-external-service"
    UNKNOWN = "unknown"


@dataclass
class HealthReport:
    status: HealthStatus
    service: str | None = None
    url: str | None = None
    status_line: str | None = None
    detail: str | None = None


def endpoint_url(service: ServiceInfo) -> str:
    """Build the probe URL; the port is omitted when the service listens on 80.

    IPv6 addresses are bracketed so the port separator stays unambiguous.
    """
    host = service.external_address
    if ":" in host:
        host = f"[{host}]"
    port = service.ports[0] if service.ports else 80
    if port == 80:
        return f"http://{host}"
    return f"http://{host}:{port}"


def _status_line(response: httpx.Response) -> str:
    return f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()


def probe_health(
    config: RunConfig,
    client: ClusterClient,
    http_head: Callable[..., httpx.Response] | None = None,
) -> HealthReport:
    """Probe the first LoadBalancer service once; every failure is a warning."""
    logger.info("Executing basic platform health checks...")
    report = _probe(config, client, http_head or httpx.head)
    logger.info("Health check process completed.")
    return report


def _probe(
    config: RunConfig,
    client: ClusterClient,
    http_head: Callable[..., httpx.Response],
) -> HealthReport:
    try:
        services = client.list_services(config.namespace)
    except KubectlError as e:
        logger.warning("Could not list services for health check: %s", e)
        return HealthReport(status=HealthStatus.UNKNOWN, detail=str(e))

    external = next((svc for svc in services if svc.is_external), None)
    if external is None:
        logger.warning("No LoadBalancer service detected for external health check.")
        return HealthReport(status=HealthStatus.NO_EXTERNAL_SERVICE)

    if not external.external_address or external.external_address == PENDING_ADDRESS:
        logger.warning("LoadBalancer external endpoint is still pending.")
        return HealthReport(status=HealthStatus.PENDING, service=external.name)

    url = endpoint_url(external)
    logger.info("Testing external endpoint availability: %s", url)
    try:
        response = http_head(url, timeout=config.probe_timeout_seconds)
    except httpx.HTTPError as e:
        logger.warning("External endpoint not responding yet.")
        return HealthReport(
            status=HealthStatus.UNREACHABLE,
            service=external.name,
            url=url,
            detail=f"{type(e).__name__}: {e}",
        )

    line = _status_line(response)
    logger.info(line)
    return HealthReport(
        status=HealthStatus.REACHABLE,
        service=external.name,
        url=url,
        status_line=line,
    )
