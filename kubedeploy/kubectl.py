"""Thin wrapper around the kubectl CLI.

Every cluster interaction goes through :class:`KubectlClient`. Stages accept
anything matching :class:`ClusterClient`, so tests inject fakes instead.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from kubedeploy._log import get_logger
from kubedeploy.errors import KubectlError

logger = get_logger("kubectl")

PENDING_ADDRESS = "<pending>"
EXTERNAL_SERVICE_TYPE = "LoadBalancer"


@dataclass
class ApplyOutcome:
    path: Path
    output: str = ""

    @property
    def changed(self) -> bool:
        """False when every object kubectl reported was ``unchanged``."""
        lines = [line.rstrip() for line in self.output.splitlines() if line.strip()]
        return any(not line.endswith("unchanged") for line in lines)


@dataclass
class ServiceInfo:
    name: str
    type: str = "ClusterIP"
    external_address: str = ""
    ports: list[int] = field(default_factory=list)

    @property
    def is_external(self) -> bool:
        return self.type == EXTERNAL_SERVICE_TYPE


class ClusterClient(Protocol):
    def is_installed(self) -> bool: ...

    def cluster_info(self) -> str: ...

    def apply(self, path: Path) -> ApplyOutcome: ...

    def delete(self, path: Path) -> str: ...

    def delete_namespace(self, namespace: str) -> str: ...

    def get(self, kind: str, namespace: str) -> str: ...

    def list_services(self, namespace: str) -> list[ServiceInfo]: ...


def parse_services(payload: str) -> list[ServiceInfo]:
    """Parse ``kubectl get svc -o json`` output into :class:`ServiceInfo` rows.

    A LoadBalancer without an ingress entry gets :data:`PENDING_ADDRESS`,
    matching what ``kubectl get svc`` prints in its EXTERNAL-IP column.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise KubectlError(f"Unparseable service listing: {e}") from e

    services: list[ServiceInfo] = []
    for item in data.get("items", []):
        metadata = item.get("metadata", {})
        spec = item.get("spec", {})
        status = item.get("status", {})

        svc_type = spec.get("type", "ClusterIP")
        address = ""
        if svc_type == EXTERNAL_SERVICE_TYPE:
            ingress = status.get("loadBalancer", {}).get("ingress") or []
            if ingress:
                address = ingress[0].get("ip") or ingress[0].get("hostname") or PENDING_ADDRESS
            else:
                address = PENDING_ADDRESS

        services.append(
            ServiceInfo(
                name=metadata.get("name", ""),
                type=svc_type,
                external_address=address,
                ports=[p["port"] for p in spec.get("ports", []) if "port" in p],
            )
        )
    return services


class KubectlClient:
    """Run kubectl subcommands. No timeout is applied to any call."""

    def __init__(self, executable: str = "kubectl") -> None:
        self.executable = executable

    def _run(self, args: list[str]) -> str:
        cmd = [self.executable, *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            raise KubectlError(f"{self.executable} not found in PATH") from None
        except OSError as e:
            raise KubectlError(f"Cannot execute {self.executable}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise KubectlError(
                f"{' '.join(cmd)} exited with {result.returncode}: {stderr}",
                returncode=result.returncode,
                stderr=stderr,
            )
        return result.stdout

    def is_installed(self) -> bool:
        return shutil.which(self.executable) is not None

    def cluster_info(self) -> str:
        return self._run(["cluster-info"])

    def apply(self, path: Path) -> ApplyOutcome:
        if not path.exists():
            raise KubectlError(f"Manifest not found: {path}")
        output = self._run(["apply", "-f", str(path)])
        logger.debug("Applied %s", path)
        return ApplyOutcome(path=path, output=output)

    def delete(self, path: Path) -> str:
        return self._run(["delete", "-f", str(path)])

    def delete_namespace(self, namespace: str) -> str:
        return self._run(["delete", "namespace", namespace])

    def get(self, kind: str, namespace: str) -> str:
        return self._run(["get", kind, "-n", namespace])

    def list_services(self, namespace: str) -> list[ServiceInfo]:
        return parse_services(self._run(["get", "svc", "-n", namespace, "-o", "json"]))
