"""Exception types shared across kubedeploy."""

from __future__ import annotations


class DeploymentError(Exception):
    """Base class for kubedeploy errors."""


class ConfigLoadError(DeploymentError):
    """Raised when a run configuration file cannot be loaded or validated."""


class PreflightError(DeploymentError):
    """Raised when a mandatory prerequisite is missing. Aborts the run."""


class KubectlError(DeploymentError):
    """Raised when a kubectl invocation cannot run or exits non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
