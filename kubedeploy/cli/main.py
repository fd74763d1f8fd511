"""Typer CLI for kubedeploy: ``kubedeploy [OPTIONS] [deploy|verify|clean|help]``."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from kubedeploy.cli._helpers import (
    ACTION_ALIASES,
    ACTIONS,
    console,
    load_config_or_exit,
    show_usage,
)

app = typer.Typer(
    name="kubedeploy",
    help="Deploy the LMS/CMS platform to Kubernetes with kubectl.",
    add_completion=False,
)


# ---------------------------------------------------------------------------
# Callbacks
# ---------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    if value:
        from kubedeploy import __version__

        console.print(f"kubedeploy {__version__}")
        raise typer.Exit()


def help_callback(value: bool) -> None:
    if value:
        show_usage()
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def _display_plan(config: object) -> None:
    from kubedeploy.config import RunConfig
    from kubedeploy.pipeline.schema import build_apply_stages

    c: RunConfig = config  # type: ignore[assignment]

    table = Table(title=f"Deploy plan: namespace {c.namespace}")
    table.add_column("#", justify="right")
    table.add_column("Stage", style="cyan")
    table.add_column("Manifest")
    table.add_column("On failure")

    for i, stage in enumerate(build_apply_stages(c), 1):
        manifest = str(stage.manifest)
        if not stage.manifest.exists():
            manifest = f"{escape(manifest)} [yellow](missing)[/yellow]"
        else:
            manifest = escape(manifest)
        table.add_row(str(i), stage.name, manifest, stage.failure_message)

    console.print(table)
    console.print(f"\n[bold]Settle delay:[/bold] {c.settle_seconds:g}s")
    console.print(f"[bold]Log file:[/bold] {escape(str(c.log_file))}")
    console.print("\n[green]Dry run: no cluster calls were made.[/green]")


def _display_cleanup_plan(config: object) -> None:
    from kubedeploy.config import RunConfig
    from kubedeploy.pipeline.schema import build_cleanup_steps

    c: RunConfig = config  # type: ignore[assignment]

    table = Table(title=f"Cleanup plan: namespace {c.namespace}")
    table.add_column("#", justify="right")
    table.add_column("Step", style="cyan")
    table.add_column("Target")

    for i, step in enumerate(build_cleanup_steps(c), 1):
        table.add_row(str(i), step.name, escape(step.target))

    console.print(table)
    console.print("\n[green]Dry run: no cluster calls were made.[/green]")


def _display_deployment_result(result: object) -> None:
    from kubedeploy.orchestrator import DeploymentResult
    from kubedeploy.pipeline.executor import StageStatus

    r: DeploymentResult = result  # type: ignore[assignment]
    if r.pipeline is None:
        console.print(f"[red]Deployment aborted:[/red] {escape(r.error or 'preflight failed')}")
        return

    table = Table(title=f"Deployment {r.run_id} ({r.namespace})")
    table.add_column("Stage", style="cyan")
    table.add_column("Status")
    table.add_column("Duration")

    for sr in r.pipeline.stage_results:
        if sr.status == StageStatus.SKIPPED:
            status = "[dim]SKIP[/dim]"
        elif sr.status == StageStatus.HARD_FAILURE:
            status = f"[red]FAIL[/red] ({escape(sr.error or '')})"
        elif sr.changed:
            status = "[green]APPLIED[/green]"
        else:
            status = "[green]UNCHANGED[/green]"
        table.add_row(sr.name, status, f"{sr.duration_ms}ms")

    console.print(table)
    if r.preflight is not None and r.preflight.missing_optional:
        missing = ", ".join(r.preflight.missing_optional)
        console.print(f"[yellow]Optional tools not found:[/yellow] {escape(missing)}")
    if r.success:
        health = r.health.status.value if r.health is not None else "n/a"
        console.print(f"[green]Deployment succeeded[/green] (health: {health})")
    else:
        console.print(f"[red]Deployment aborted:[/red] {escape(r.error or '')}")


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@app.command(
    add_help_option=False,
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
)
def main(
    ctx: typer.Context,
    action: Annotated[
        str, typer.Argument(help="deploy (default), verify, clean/cleanup or help")
    ] = "deploy",
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", envvar="KUBEDEPLOY_NAMESPACE", help="Target namespace"),
    ] = None,
    manifest_dir: Annotated[
        Path | None,
        typer.Option(envvar="KUBEDEPLOY_MANIFEST_DIR", help="Manifest root directory"),
    ] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", help="YAML run configuration")
    ] = None,
    settle_seconds: Annotated[
        float | None,
        typer.Option(envvar="KUBEDEPLOY_SETTLE_SECONDS", help="Wait before verification"),
    ] = None,
    log_dir: Annotated[
        Path | None, typer.Option(envvar="KUBEDEPLOY_LOG_DIR", help="Directory for the run log")
    ] = None,
    kubectl: Annotated[
        str | None, typer.Option(envvar="KUBEDEPLOY_KUBECTL", help="kubectl executable")
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show the plan without touching the cluster")
    ] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable colored logs")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = None,
    show_help: Annotated[
        bool | None,
        typer.Option(
            "--help", "-h", callback=help_callback, is_eager=True, help="Show usage and exit"
        ),
    ] = None,
) -> None:
    """Deploy, verify or tear down the platform."""
    action = ACTION_ALIASES.get(action, action)
    # Unknown flags land in the action slot or in ctx.args.
    unexpected = action if action not in ACTIONS else next(iter(ctx.args), None)
    if unexpected is not None:
        console.print(f"Invalid option: {escape(unexpected)}", highlight=False)
        show_usage()
        raise typer.Exit(1)
    if action == "help":
        show_usage()
        return
    if dry_run and action == "verify":
        console.print("[red]Error:[/red] --dry-run applies to deploy and clean only.")
        raise typer.Exit(1)

    config = load_config_or_exit(
        config_file,
        namespace=namespace,
        manifest_dir=manifest_dir,
        settle_seconds=settle_seconds,
        log_dir=log_dir,
        kubectl=kubectl,
        color=False if no_color else None,
    )

    from kubedeploy._log import setup_logging

    setup_logging(verbose=verbose, color=config.color)

    if dry_run:
        if action == "deploy":
            _display_plan(config)
        else:
            _display_cleanup_plan(config)
        return

    from kubedeploy._log import run_log
    from kubedeploy.kubectl import KubectlClient

    client = KubectlClient(config.kubectl)
    config.log_dir.mkdir(parents=True, exist_ok=True)

    with run_log(config.log_file):
        if action == "deploy":
            from kubedeploy.orchestrator import run_deployment

            result = run_deployment(config, client)
            _display_deployment_result(result)
            if not result.success:
                raise typer.Exit(1)
        elif action == "verify":
            from kubedeploy.verify import verify_deployment

            verify_deployment(config, client)
        else:
            from kubedeploy.cleanup import run_cleanup

            run_cleanup(config, client)


def app_entry() -> None:
    """Entry point for the CLI."""
    app()
