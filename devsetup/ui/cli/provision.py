"""
CLI commands for the provisioning pipelines.

Thin wrappers over ``devsetup.core.use_cases.provision``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from devsetup.core.engine.executor import Step
from devsetup.core.models.action import Receipt


def _prompt(text: str) -> str:
    # Prompts go to stderr so --json output stays parseable.
    return click.prompt(text, default="", show_default=False, err=True)


def _progress_callbacks(ctx: click.Context, as_json: bool) -> dict:
    """on_start / on_receipt hooks that print one line per step."""
    if as_json:
        return {}

    quiet = ctx.obj.get("quiet", False)
    verbose = ctx.obj.get("verbose", False)

    def on_start(step: Step) -> None:
        if not quiet:
            click.secho(f"   → {step.label}...", fg="cyan")

    def on_receipt(step: Step, receipt: Receipt) -> None:
        timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
        if receipt.ok:
            label = "[dry-run] " if receipt.metadata.get("dry_run") else ""
            if not quiet:
                click.secho(f"   ✓ {label}{step.id}", fg="green", nl=False)
                click.echo(timing)
            if verbose and receipt.output:
                for line in receipt.output.split("\n")[:10]:
                    click.echo(f"     │ {line}")
        elif receipt.failed:
            marker = "✗" if step.fatal else "⚠️ "
            click.secho(f"   {marker} {step.id}", fg="red" if step.fatal else "yellow", nl=False)
            click.echo(timing)
            if receipt.error:
                for line in receipt.error.split("\n")[:5]:
                    click.echo(f"     │ {line}")
        elif not quiet:
            click.secho(f"   ⊘ {step.id} ", fg="yellow", nl=False)
            click.echo(f"({receipt.output})")

    return {"on_start": on_start, "on_receipt": on_receipt}


def _finish(result, as_json: bool, title: str) -> None:
    """Print the summary and exit with the pipeline's exit code."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    report = result.report
    if report is None:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(result.exit_code)

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "aborted": "red"}.get(
        report.status, "white"
    )
    mode = "[dry-run] " if result.dry_run else ""
    click.secho(
        f"   {mode}{title}: {report.succeeded} done, {report.skipped} already present, "
        f"{report.failed} failed",
        fg=status_color,
        bold=True,
    )
    if report.aborted:
        click.secho(f"❌ Stopped at {report.aborted_at}: {result.error}", fg="red")
        click.echo("   Fix the problem and re-run; completed steps will be skipped.")
    click.echo()
    sys.exit(result.exit_code)


@click.command()
@click.option("--dry-run", is_flag=True, help="Probe only; show what would be installed.")
@click.option(
    "--databases",
    default=None,
    help='Databases to install, e.g. "1 3" or "postgresql redis" (skips the prompt).',
)
@click.option(
    "--docker/--no-docker",
    default=None,
    help="Install Docker without asking (default: ask).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def tools(
    ctx: click.Context,
    dry_run: bool,
    databases: str | None,
    docker: bool | None,
    as_json: bool,
) -> None:
    """Install the fullstack development toolchain.

    Examples:

        devsetup tools

        devsetup tools --databases "postgresql redis" --no-docker

        devsetup tools --dry-run
    """
    from devsetup.core.use_cases.provision import run_dev_tools

    if not as_json and not ctx.obj.get("quiet"):
        mode = "[dry-run] " if dry_run else ""
        click.secho(f"\n🚀 {mode}Development tools setup", fg="cyan", bold=True)

    config_path: Path | None = ctx.obj.get("config_path")
    result = run_dev_tools(
        prompt=_prompt,
        config_path=config_path,
        databases=databases,
        docker=docker,
        dry_run=dry_run,
        **_progress_callbacks(ctx, as_json),
    )
    _finish(result, as_json, "Development tools")


@click.command()
@click.option("--dry-run", is_flag=True, help="Probe only; show what would be changed.")
@click.option(
    "--upgrade/--no-upgrade",
    default=None,
    help="Upgrade all system packages at the end (default: from config, off).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def shell(ctx: click.Context, dry_run: bool, upgrade: bool | None, as_json: bool) -> None:
    """Install zsh with Oh My Posh, plugins and shell config files."""
    from devsetup.core.use_cases.provision import run_shell_setup

    if not as_json and not ctx.obj.get("quiet"):
        mode = "[dry-run] " if dry_run else ""
        click.secho(f"\n🐚 {mode}Shell setup", fg="cyan", bold=True)

    result = run_shell_setup(
        config_path=ctx.obj.get("config_path"),
        upgrade=upgrade,
        dry_run=dry_run,
        **_progress_callbacks(ctx, as_json),
    )
    _finish(result, as_json, "Shell setup")
