"""Shared CLI helpers: console, usage text and config loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from kubedeploy.config import RunConfig

console = Console()

ACTIONS: dict[str, str] = {
    "deploy": "Run full deployment pipeline (default)",
    "verify": "Validate running deployment resources",
    "clean": "Remove deployed resources from cluster",
    "help": "Show available commands",
}
ACTION_ALIASES = {"cleanup": "clean"}

_OPTIONS: list[tuple[str, str]] = [
    ("-n, --namespace NAME", "Target namespace [env: KUBEDEPLOY_NAMESPACE]"),
    ("--manifest-dir PATH", "Manifest root directory [env: KUBEDEPLOY_MANIFEST_DIR]"),
    ("--config PATH", "YAML run configuration"),
    ("--settle-seconds N", "Wait before verification [env: KUBEDEPLOY_SETTLE_SECONDS]"),
    ("--log-dir PATH", "Directory for the run log [env: KUBEDEPLOY_LOG_DIR]"),
    ("--kubectl PATH", "kubectl executable [env: KUBEDEPLOY_KUBECTL]"),
    ("--dry-run", "Show the deploy or clean plan without touching the cluster"),
    ("--no-color", "Disable colored log output"),
    ("--verbose", "Enable debug logging"),
    ("--version", "Show version and exit"),
    ("-h, --help", "Show this message and exit"),
]


def show_usage() -> None:
    console.print("Usage: kubedeploy [OPTIONS] [ACTION]", highlight=False, markup=False)
    console.print()
    console.print("Actions:")
    for name, desc in ACTIONS.items():
        console.print(f"  {name:<10} - {desc}", highlight=False)
    console.print()
    console.print("Options:")
    for flag, desc in _OPTIONS:
        console.print(f"  {flag:<24} {desc}", highlight=False, markup=False)


def load_config_or_exit(config_file: Path | None, **overrides: Any) -> RunConfig:
    from kubedeploy.config import load_config
    from kubedeploy.errors import ConfigLoadError

    try:
        return load_config(config_file, **overrides)
    except ConfigLoadError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1) from None
