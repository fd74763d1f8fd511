"""Shared test fixtures and helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from kubedeploy.config import ManifestLayout, RunConfig
from kubedeploy.errors import KubectlError
from kubedeploy.kubectl import ApplyOutcome, ServiceInfo


class FakeCluster:
    """In-memory ClusterClient that records every call.

    ``fail_on`` holds manifest paths (or ``"cluster-info"``, ``"get:<kind>"``,
    ``"namespace:<name>"``, ``"list_services"``) whose call raises KubectlError.
    Applied manifests are remembered so a second apply reports ``unchanged``.
    """

    def __init__(
        self,
        *,
        installed: bool = True,
        fail_on: set[str] | None = None,
        services: list[ServiceInfo] | None = None,
        listings: dict[str, str] | None = None,
    ) -> None:
        self.installed = installed
        self.fail_on = fail_on or set()
        self.services = services or []
        self.listings = listings or {}
        self.calls: list[tuple[str, str]] = []
        self.applied: set[Path] = set()

    def _maybe_fail(self, key: str) -> None:
        if key in self.fail_on:
            raise KubectlError(f"simulated failure: {key}", returncode=1, stderr="boom")

    def is_installed(self) -> bool:
        return self.installed

    def cluster_info(self) -> str:
        self.calls.append(("cluster-info", ""))
        self._maybe_fail("cluster-info")
        return "Kubernetes control plane is running"

    def apply(self, path: Path) -> ApplyOutcome:
        self.calls.append(("apply", str(path)))
        self._maybe_fail(str(path))
        verb = "unchanged" if path in self.applied else "created"
        self.applied.add(path)
        return ApplyOutcome(path=path, output=f"{path.name} {verb}\n")

    def delete(self, path: Path) -> str:
        self.calls.append(("delete", str(path)))
        self._maybe_fail(str(path))
        return f"{path.name} deleted\n"

    def delete_namespace(self, namespace: str) -> str:
        self.calls.append(("delete-namespace", namespace))
        self._maybe_fail(f"namespace:{namespace}")
        return f'namespace "{namespace}" deleted\n'

    def get(self, kind: str, namespace: str) -> str:
        self.calls.append(("get", kind))
        self._maybe_fail(f"get:{kind}")
        return self.listings.get(kind, "")

    def list_services(self, namespace: str) -> list[ServiceInfo]:
        self.calls.append(("list_services", namespace))
        self._maybe_fail("list_services")
        return self.services

    def calls_of(self, kind: str) -> list[str]:
        return [target for call, target in self.calls if call == kind]


def make_config(tmp_path: Path, **kwargs) -> RunConfig:
    """Build a RunConfig rooted in *tmp_path* with no settle delay."""
    kwargs.setdefault("manifest_dir", tmp_path / "kubernetes")
    kwargs.setdefault("log_dir", tmp_path / "logs")
    kwargs.setdefault("settle_seconds", 0)
    kwargs.setdefault("color", False)
    kwargs.setdefault("run_id", "20260101_120000")
    return RunConfig(**kwargs)


def write_manifests(manifest_dir: Path) -> None:
    """Create every manifest set of the default layout as an empty file or directory."""
    layout = ManifestLayout()
    for name in ManifestLayout.model_fields:
        target = manifest_dir / getattr(layout, name)
        if target.suffix == ".yaml":
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("apiVersion: v1\n")
        else:
            target.mkdir(parents=True, exist_ok=True)


@pytest.fixture
def config(tmp_path):
    return make_config(tmp_path)


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture()
def caplog_kubedeploy(caplog):
    """Attach caplog to the ``kubedeploy`` logger, which does not propagate."""
    root = logging.getLogger("kubedeploy")
    root.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="kubedeploy")
    yield caplog
    root.removeHandler(caplog.handler)
