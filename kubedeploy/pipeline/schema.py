"""Stage descriptors for the apply pipeline and the cleanup sequence."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from kubedeploy.config import RunConfig


class ApplyStage(BaseModel):
    name: str
    manifest: Path
    description: str
    failure_message: str


class CleanupStep(BaseModel):
    name: str
    manifest: Path | None = None
    namespace: str | None = None

    @property
    def target(self) -> str:
        if self.namespace is not None:
            return f"namespace/{self.namespace}"
        return str(self.manifest)


# (stage name, manifest set, log line, failure message)
_APPLY_ORDER: list[tuple[str, str, str, str]] = [
    ("namespace", "namespace", "Ensuring namespace exists: {ns}", "Namespace creation failed."),
    (
        "storage",
        "storage",
        "Applying persistent storage resources...",
        "Storage configuration failed.",
    ),
    (
        "configmaps",
        "configmaps",
        "Applying application configuration (ConfigMaps)...",
        "ConfigMaps deployment failed.",
    ),
    ("lms-deployment", "lms_deployment", "Deploying LMS workload...", "LMS deployment failed."),
    ("lms-service", "lms_service", "Exposing LMS service...", "LMS service creation failed."),
    ("cms-deployment", "cms_deployment", "Deploying CMS workload...", "CMS deployment failed."),
    ("cms-service", "cms_service", "Exposing CMS service...", "CMS service creation failed."),
    (
        "hpa",
        "hpa",
        "Applying Horizontal Pod Autoscaler (HPA) configurations...",
        "HPA configuration failed.",
    ),
    ("ingress", "ingress", "Applying ingress routing rules...", "Ingress configuration failed."),
]

# Reverse dependency order; the namespace goes last.
_CLEANUP_ORDER = ["ingress", "hpa", "services", "deployments", "configmaps", "storage"]


def build_apply_stages(config: RunConfig) -> list[ApplyStage]:
    """Return the deploy pipeline in execution order."""
    return [
        ApplyStage(
            name=name,
            manifest=config.manifest_path(manifest_set),
            description=description.format(ns=config.namespace),
            failure_message=failure,
        )
        for name, manifest_set, description, failure in _APPLY_ORDER
    ]


def build_cleanup_steps(config: RunConfig) -> list[CleanupStep]:
    """Return the teardown sequence in execution order."""
    steps = [
        CleanupStep(name=name, manifest=config.manifest_path(name)) for name in _CLEANUP_ORDER
    ]
    steps.append(CleanupStep(name="namespace", namespace=config.namespace))
    return steps
