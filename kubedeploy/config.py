"""Run configuration: one object built at startup and handed to every stage.

Values come from, highest precedence first: CLI options, ``KUBEDEPLOY_*``
environment variables (bound by the CLI), an optional YAML file, defaults.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kubedeploy.errors import ConfigLoadError

DEFAULT_NAMESPACE = "openedx"
DEFAULT_MANIFEST_DIR = Path("kubernetes")
DEFAULT_SETTLE_SECONDS = 30
DEFAULT_PROBE_TIMEOUT_SECONDS = 10


def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


class ManifestLayout(BaseModel):
    """Manifest sets, relative to ``RunConfig.manifest_dir``."""

    model_config = ConfigDict(extra="forbid")

    namespace: Path = Path("namespaces/openedx-namespace.yaml")
    storage: Path = Path("storage")
    configmaps: Path = Path("configmaps")
    lms_deployment: Path = Path("deployments/lms-deployment.yaml")
    lms_service: Path = Path("services/lms-service.yaml")
    cms_deployment: Path = Path("deployments/cms-deployment.yaml")
    cms_service: Path = Path("services/cms-service.yaml")
    deployments: Path = Path("deployments")
    services: Path = Path("services")
    hpa: Path = Path("hpa")
    ingress: Path = Path("ingress")


class RunConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    namespace: str = Field(DEFAULT_NAMESPACE, min_length=1)
    manifest_dir: Path = DEFAULT_MANIFEST_DIR
    manifests: ManifestLayout = ManifestLayout()
    log_dir: Path = Path(".")
    settle_seconds: float = Field(DEFAULT_SETTLE_SECONDS, ge=0)
    probe_timeout_seconds: float = Field(DEFAULT_PROBE_TIMEOUT_SECONDS, gt=0)
    kubectl: str = "kubectl"
    optional_tools: list[str] = ["helm", "aws"]
    color: bool = True
    run_id: str = Field(default_factory=_timestamp)

    @property
    def log_file(self) -> Path:
        return self.log_dir / f"deployment_{self.run_id}.log"

    def manifest_path(self, name: str) -> Path:
        """Resolve a manifest set from :class:`ManifestLayout` by field name."""
        relative: Path = getattr(self.manifests, name)
        if relative.is_absolute():
            return relative
        return self.manifest_dir / relative


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text()
    except OSError as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def load_config(path: Path | None = None, **overrides: Any) -> RunConfig:
    """Build a :class:`RunConfig` from an optional YAML file plus overrides.

    Overrides whose value is ``None`` are ignored so unset CLI options fall
    through to the file or the defaults.
    """
    data = _read_config_file(path) if path is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RunConfig.model_validate(data)
    except ValidationError as e:
        source = str(path) if path is not None else "options"
        raise ConfigLoadError(f"Validation failed for {source}:\n{e}") from e
