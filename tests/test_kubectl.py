"""Tests for the kubectl wrapper."""

from __future__ import annotations

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from kubedeploy.errors import KubectlError
from kubedeploy.kubectl import (
    PENDING_ADDRESS,
    ApplyOutcome,
    KubectlClient,
    parse_services,
)


def _completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> MagicMock:
    result = MagicMock(spec=subprocess.CompletedProcess)
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


def _svc(name: str, svc_type: str = "ClusterIP", ingress=None, port: int = 80) -> dict:
    item = {
        "metadata": {"name": name},
        "spec": {"type": svc_type, "ports": [{"port": port}]},
        "status": {},
    }
    if ingress is not None:
        item["status"] = {"loadBalancer": {"ingress": ingress}}
    return item


class TestApplyOutcome:
    def test_created_is_changed(self):
        outcome = ApplyOutcome(path=MagicMock(), output="deployment.apps/lms created\n")
        assert outcome.changed is True

    def test_all_unchanged(self):
        output = "service/lms unchanged\nservice/cms unchanged\n"
        assert ApplyOutcome(path=MagicMock(), output=output).changed is False

    def test_mixed(self):
        output = "configmap/a unchanged\nconfigmap/b configured\n"
        assert ApplyOutcome(path=MagicMock(), output=output).changed is True


class TestKubectlClient:
    def test_apply_runs_kubectl(self, tmp_path):
        manifest = tmp_path / "ns.yaml"
        manifest.write_text("kind: Namespace\n")
        client = KubectlClient()

        with patch("kubedeploy.kubectl.subprocess.run") as mock_run:
            mock_run.return_value = _completed(stdout="namespace/openedx created\n")
            outcome = client.apply(manifest)

        mock_run.assert_called_once_with(
            ["kubectl", "apply", "-f", str(manifest)], capture_output=True, text=True
        )
        assert outcome.changed is True
        assert outcome.output == "namespace/openedx created\n"

    def test_apply_missing_manifest(self, tmp_path):
        client = KubectlClient()
        with patch("kubedeploy.kubectl.subprocess.run") as mock_run:
            with pytest.raises(KubectlError, match="Manifest not found"):
                client.apply(tmp_path / "missing.yaml")
        mock_run.assert_not_called()

    def test_nonzero_exit_raises(self, tmp_path):
        client = KubectlClient()
        with patch("kubedeploy.kubectl.subprocess.run") as mock_run:
            mock_run.return_value = _completed(stderr="error: forbidden\n", returncode=1)
            with pytest.raises(KubectlError) as exc_info:
                client.delete(tmp_path / "hpa")

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "error: forbidden"

    def test_missing_executable(self):
        client = KubectlClient("kubectl-nope")
        with patch("kubedeploy.kubectl.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(KubectlError, match="kubectl-nope not found"):
                client.cluster_info()

    def test_custom_executable(self):
        client = KubectlClient("/opt/bin/kubectl")
        with patch("kubedeploy.kubectl.subprocess.run") as mock_run:
            mock_run.return_value = _completed(stdout="pods")
            client.get("pods", "openedx")
        assert mock_run.call_args.args[0] == ["/opt/bin/kubectl", "get", "pods", "-n", "openedx"]

    def test_delete_namespace(self):
        client = KubectlClient()
        with patch("kubedeploy.kubectl.subprocess.run") as mock_run:
            mock_run.return_value = _completed(stdout='namespace "openedx" deleted\n')
            client.delete_namespace("openedx")
        assert mock_run.call_args.args[0] == ["kubectl", "delete", "namespace", "openedx"]

    def test_is_installed(self):
        with patch("kubedeploy.kubectl.shutil.which", return_value="/usr/bin/kubectl"):
            assert KubectlClient().is_installed() is True
        with patch("kubedeploy.kubectl.shutil.which", return_value=None):
            assert KubectlClient().is_installed() is False

    def test_list_services_uses_json(self):
        payload = json.dumps({"items": [_svc("lms")]})
        client = KubectlClient()
        with patch("kubedeploy.kubectl.subprocess.run") as mock_run:
            mock_run.return_value = _completed(stdout=payload)
            services = client.list_services("openedx")
        assert mock_run.call_args.args[0][-2:] == ["-o", "json"]
        assert [s.name for s in services] == ["lms"]


class TestParseServices:
    def test_cluster_ip_has_no_address(self):
        services = parse_services(json.dumps({"items": [_svc("cms")]}))
        assert services[0].is_external is False
        assert services[0].external_address == ""

    def test_load_balancer_without_ingress_is_pending(self):
        services = parse_services(json.dumps({"items": [_svc("lms", "LoadBalancer")]}))
        assert services[0].is_external is True
        assert services[0].external_address == PENDING_ADDRESS

    def test_load_balancer_ip(self):
        items = [_svc("lms", "LoadBalancer", ingress=[{"ip": "203.0.113.10"}])]
        services = parse_services(json.dumps({"items": items}))
        assert services[0].external_address == "203.0.113.10"

    def test_load_balancer_hostname(self):
        items = [_svc("lms", "LoadBalancer", ingress=[{"hostname": "lb.example.com"}], port=8000)]
        services = parse_services(json.dumps({"items": items}))
        assert services[0].external_address == "lb.example.com"
        assert services[0].ports == [8000]

    def test_empty_listing(self):
        assert parse_services('{"items": []}') == []

    def test_invalid_json(self):
        with pytest.raises(KubectlError, match="Unparseable"):
            parse_services("No resources found")
